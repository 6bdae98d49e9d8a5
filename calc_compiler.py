#!/usr/bin/env python3
"""
File: calc_compiler.py

Description: Interpreter and C translator for a tiny integer calculator
language, written in python.
"""
"""
===============================================================================
  calc — a *single‑file* interpreter + C code generator for a calculator language
===============================================================================

Install `ply` (Python‑Lex‑Yacc) and run

    python calc_compiler.py prog.calc                # run, then write prog.calc.c
    python calc_compiler.py prog.calc --emit ast     # dump the syntax tree
    python calc_compiler.py prog.calc --emit tokens  # dump the token stream

-------------------------------------------------------------------------------
Supported language features
-------------------------------------------------------------------------------
✔  Non‑negative integer literals and variables
✔  Arithmetic +  -  *  /  (left‑assoc, C precedence, parentheses)
✔  Assignment     name = expr
✔  Output         print expr
✔  Statements separated by newlines and/or an optional ';'

Every program goes through two passes over one parsed tree:
    • pass 1 executes each statement and records the variables in
      first‑assignment order
    • pass 2 re‑renders each statement as C source, declaring those
      variables up front

Any lexical, syntax or runtime error aborts the run with a one‑line
diagnostic.  There are no loops, conditionals, functions, floats or strings.
"""
# =============================================================================
#  Imports
# =============================================================================
import argparse
import logging
import sys
from collections import namedtuple

try:
    import ply.lex as lex
except ImportError:
    sys.stderr.write("[FATAL] This script depends on the PLY package.\n"
                     "        pip install ply\n")
    raise

log = logging.getLogger("calc_compiler")

# Configuration ---------------------------------------------------------------
OUTPUT_SUFFIX = '.c'
MAX_VARIABLES = 100

# Range of a C `int`; results outside it would not print the same in C.
INT_MIN = -2**31
INT_MAX = 2**31 - 1

EXAMPLE_PROGRAM = """\
x = 10
y = 20
z = x + y * 2
print z
"""

# =============================================================================
#  0.  Errors  ─────────────────────────────────────────────────────────────────
# =============================================================================
class CalcError(Exception):
    """Base for every fatal error; `kind` names it in diagnostics."""
    kind = 'Error'

    def __init__(self, message, line=None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self):
        where = f" at line {self.line}" if self.line is not None else ''
        return f"{self.kind}{where}: {self.message}"

class LexError(CalcError):
    kind = 'LexError'

class ParseError(CalcError):
    kind = 'ParseError'

class CalcRuntimeError(CalcError):
    kind = 'RuntimeError'

class ResourceError(CalcError):
    kind = 'ResourceError'

# =============================================================================
#  1.  Lexer  ──────────────────────────────────────────────────────────────────
# =============================================================================
reserved = {
    'print': 'PRINT',
}

tokens = [
    'NUMBER', 'IDENTIFIER',
    'ASSIGN', 'PLUS', 'MINUS', 'MULTIPLY', 'DIVIDE',
    'LPAREN', 'RPAREN', 'SEMICOLON', 'NEWLINE',
] + list(reserved.values())

# Token regex -----------------------------------------------------------------

t_ignore          = ' \t'

t_ASSIGN          = r'='
t_PLUS            = r'\+'
t_MINUS           = r'-'
t_MULTIPLY        = r'\*'
t_DIVIDE          = r'/'
t_LPAREN          = r'\('
t_RPAREN          = r'\)'
t_SEMICOLON       = r';'

# Newlines separate statements, so they are tokens here.
def t_NEWLINE(t):
    r'\n'
    t.lexer.lineno += 1
    return t

# Numbers keep their literal text; the interpreter converts.
def t_NUMBER(t):
    r'[0-9]+'
    return t

def t_IDENTIFIER(t):
    r'[A-Za-z][A-Za-z0-9_]*'
    t.type = reserved.get(t.value, 'IDENTIFIER')
    return t

def t_error(t):
    raise LexError(f"unknown character '{t.value[0]}'", t.lexer.lineno)

_lexer = lex.lex()

Token = namedtuple('Token', 'kind text line')

class Lexer:
    """Cursor over one source buffer.

    Each instance works on its own clone of the PLY lexer, so several
    programs can be lexed side by side.  `reset()` rewinds to the start.
    """
    def __init__(self, source):
        self.source = source
        self._lex = _lexer.clone()
        self.reset()

    def reset(self):
        self._lex.input(self.source)
        self._lex.lineno = 1

    def next_token(self):
        t = self._lex.token()
        if t is None:
            return Token('EOF', '', self._lex.lineno)
        return Token(t.type, t.value, t.lineno)

    def tokens(self):
        self.reset()
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == 'EOF':
                return

def describe(tok):
    if tok.kind == 'NEWLINE':
        return 'end of line'
    if tok.kind == 'EOF':
        return 'end of input'
    return f"'{tok.text}'"

# =============================================================================
#  2.  AST  ────────────────────────────────────────────────────────────────────
# =============================================================================
class Node:
    line = None
    children = ()

    def label(self):
        return ''

    def walk(self, indent=0):
        pad = '  '*indent
        yield f"{pad}{self.__class__.__name__}{self.label()}"
        for child in self.children:
            yield from child.walk(indent+1)

class Program(Node):
    def __init__(self, statements):
        self.statements = statements
        self.children = statements

class NumberLiteral(Node):
    def __init__(self, text, line=None):
        self.text, self.line = text, line
    def label(self):
        return f" {self.text}"
    @property
    def value(self):
        return int(self.text)

class Identifier(Node):
    def __init__(self, name, line=None):
        self.name, self.line = name, line
    def label(self):
        return f" {self.name}"

class BinaryOp(Node):
    def __init__(self, op, left, right, line=None):
        self.op, self.left, self.right = op, left, right
        self.line = line
        self.children = [left, right]
    def label(self):
        return f" '{self.op}'"

class Assignment(Node):
    def __init__(self, name, value, line=None):
        self.name, self.value, self.line = name, value, line
        self.children = [value]
    def label(self):
        return f" {self.name}"

class PrintStatement(Node):
    def __init__(self, value, line=None):
        self.value, self.line = value, line
        self.children = [value]

# =============================================================================
#  3.  Parser (recursive descent)  ─────────────────────────────────────────────
# =============================================================================
#   Grammar in EBNF
#   ---------------
#   program     ::= { NEWLINE | statement [ ';' ] } EOF
#   statement   ::= IDENTIFIER '=' expression
#                 | 'print' expression
#   expression  ::= term   { ( '+' | '-' ) term }
#   term        ::= factor { ( '*' | '/' ) factor }
#   factor      ::= NUMBER | IDENTIFIER | '(' expression ')'
#
#   One procedure per rule; precedence falls out of the call nesting and the
#   loops build left‑associative trees.  There is no unary minus.
# =============================================================================
ADDITIVE = {'PLUS': '+', 'MINUS': '-'}
MULTIPLICATIVE = {'MULTIPLY': '*', 'DIVIDE': '/'}

class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.start()

    def start(self):
        self.lexer.reset()
        self.current = self.lexer.next_token()

    def advance(self):
        self.current = self.lexer.next_token()

    def parse_program(self):
        self.start()
        statements = []
        while self.current.kind != 'EOF':
            if self.current.kind == 'NEWLINE':
                self.advance()
                continue
            statements.append(self.parse_statement())
            if self.current.kind == 'SEMICOLON':
                self.advance()
        log.debug("parsed %d statement(s)", len(statements))
        return Program(statements)

    def parse_statement(self):
        tok = self.current
        if tok.kind == 'IDENTIFIER':
            self.advance()
            if self.current.kind != 'ASSIGN':
                raise ParseError(f"invalid statement: expected '=' after "
                                 f"'{tok.text}', found {describe(self.current)}",
                                 self.current.line)
            self.advance()
            return Assignment(tok.text, self.parse_expression(), line=tok.line)
        if tok.kind == 'PRINT':
            self.advance()
            return PrintStatement(self.parse_expression(), line=tok.line)
        raise ParseError(f"invalid statement: unexpected {describe(tok)}", tok.line)

    def parse_expression(self):
        left = self.parse_term()
        while self.current.kind in ADDITIVE:
            op = self.current
            self.advance()
            left = BinaryOp(ADDITIVE[op.kind], left, self.parse_term(), line=op.line)
        return left

    def parse_term(self):
        left = self.parse_factor()
        while self.current.kind in MULTIPLICATIVE:
            op = self.current
            self.advance()
            left = BinaryOp(MULTIPLICATIVE[op.kind], left, self.parse_factor(), line=op.line)
        return left

    def parse_factor(self):
        tok = self.current
        if tok.kind == 'NUMBER':
            self.advance()
            return NumberLiteral(tok.text, line=tok.line)
        if tok.kind == 'IDENTIFIER':
            self.advance()
            return Identifier(tok.text, line=tok.line)
        if tok.kind == 'LPAREN':
            self.advance()                        # consume '('
            node = self.parse_expression()
            if self.current.kind != 'RPAREN':
                raise ParseError(f"expected ')', found {describe(self.current)}",
                                 self.current.line)
            self.advance()                        # consume ')'
            return node
        raise ParseError(f"unexpected {describe(tok)} in expression", tok.line)

def parse(source):
    return Parser(Lexer(source)).parse_program()

# =============================================================================
#  4.  Symbol table  ───────────────────────────────────────────────────────────
# =============================================================================
class SymbolTable:
    """Variable name -> current integer value, in first‑assignment order.

    The order matters: the generated C declares variables in it.
    """
    def __init__(self, capacity=MAX_VARIABLES):
        self.capacity = capacity
        self.vars = {}

    def __contains__(self, name):
        return name in self.vars

    def __len__(self):
        return len(self.vars)

    def lookup(self, name, line=None):
        if name in self.vars:
            return self.vars[name]
        raise CalcRuntimeError(f"undefined variable '{name}'", line)

    def assign(self, name, value, line=None):
        if name not in self.vars and len(self.vars) >= self.capacity:
            raise ResourceError(f"too many variables: '{name}' would exceed "
                                f"the limit of {self.capacity}", line)
        self.vars[name] = value

    def names(self):
        return list(self.vars)

# =============================================================================
#  5.  Interpreter  ────────────────────────────────────────────────────────────
# =============================================================================
def c_divide(a, b):
    # C truncates toward zero, Python's // floors.
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q

OPERATORS = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '/': c_divide,
}

class Interpreter:
    def __init__(self, symbols=None, out=None):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.out = out                  # None means sys.stdout at print time

    def visit(self, n):
        meth = 'v_' + n.__class__.__name__
        return getattr(self, meth, self.generic)(n)

    def generic(self, n):
        raise TypeError(f"cannot interpret {n.__class__.__name__}")

    def checked(self, value, n):
        if not INT_MIN <= value <= INT_MAX:
            raise CalcRuntimeError(f"integer overflow: {value} does not fit in an int", n.line)
        return value

    # Statements ---------------------------------------------------------------
    def v_Program(self, n: Program):
        for s in n.statements:
            self.visit(s)

    def v_Assignment(self, n: Assignment):
        self.symbols.assign(n.name, self.visit(n.value), n.line)

    def v_PrintStatement(self, n: PrintStatement):
        print(self.visit(n.value), file=self.out)

    # Expressions --------------------------------------------------------------
    def v_NumberLiteral(self, n: NumberLiteral):
        return self.checked(n.value, n)

    def v_Identifier(self, n: Identifier):
        return self.symbols.lookup(n.name, n.line)

    def v_BinaryOp(self, n: BinaryOp):
        a = self.visit(n.left)
        b = self.visit(n.right)
        if n.op == '/' and b == 0:
            raise CalcRuntimeError("division by zero", n.line)
        return self.checked(OPERATORS[n.op](a, b), n)

# =============================================================================
#  6.  C code generator  ───────────────────────────────────────────────────────
# =============================================================================
# Source names that would not compile (or would shadow what the generated
# program needs) as C locals.  Source identifiers never start with '_', so
# prefixing one cannot collide with another variable.
C_RESERVED = frozenset('''
    auto break case char const continue default do double else enum extern
    float for goto if inline int long register restrict return short signed
    sizeof static struct switch typedef union unsigned void volatile while
    alignas alignof bool constexpr false nullptr static_assert thread_local
    true typeof typeof_unqual
    main printf
    EOF NULL BUFSIZ FILENAME_MAX FOPEN_MAX L_tmpnam TMP_MAX
    SEEK_SET SEEK_CUR SEEK_END FILE fpos_t size_t stdin stdout stderr
'''.split())

def c_name(name):
    return '_' + name if name in C_RESERVED else name

class CodeGenerator:
    """Writes the C translation of a program to a text stream.

    Nothing is evaluated here; expressions are rendered fully parenthesized
    so C evaluates them in exactly the order the tree does.
    """
    indent = '    '

    def __init__(self, output):
        self.output = output

    def emit_prologue(self, names):
        self.output.write("#include <stdio.h>\n\n")
        self.output.write("int main() {\n")
        if names:
            self.output.write(f"{self.indent}int {', '.join(map(c_name, names))};\n\n")

    def emit_epilogue(self):
        self.output.write(f"{self.indent}return 0;\n")
        self.output.write("}\n")

    # Dispatcher ----------------------------------------------------------------
    def emit_expr(self, n):
        if isinstance(n, NumberLiteral):
            return str(n.value)
        if isinstance(n, Identifier):
            return c_name(n.name)
        if isinstance(n, BinaryOp):
            return f"({self.emit_expr(n.left)} {n.op} {self.emit_expr(n.right)})"
        raise NotImplementedError(n)

    def emit_stmt(self, n: Node):
        if isinstance(n, Assignment):
            self.output.write(f"{self.indent}{c_name(n.name)} = {self.emit_expr(n.value)};\n")
        elif isinstance(n, PrintStatement):
            self.output.write(f'{self.indent}printf("%d\\n", {self.emit_expr(n.value)});\n')
        else:
            raise NotImplementedError(n)

    def emit_program(self, program: Program, names):
        self.emit_prologue(names)
        for s in program.statements:
            self.emit_stmt(s)
        self.emit_epilogue()

# =============================================================================
#  7.  Driver  ─────────────────────────────────────────────────────────────────
# =============================================================================
class Driver:
    """Runs both passes over one parsed program.

    Pass 1 interprets every statement; the symbol table it fills supplies
    the declaration list.  Pass 2 renders the same statements as C.
    """
    def __init__(self, source, stdout=None, max_variables=MAX_VARIABLES):
        self.source = source
        self.symbols = SymbolTable(max_variables)
        self.interpreter = Interpreter(self.symbols, out=stdout)

    def parse(self):
        return parse(self.source)

    def run(self, output, program=None):
        if program is None:
            program = self.parse()

        log.info("pass 1: interpreting %d statement(s)", len(program.statements))
        for stmt in program.statements:
            self.interpreter.visit(stmt)
        log.info("pass 1: declared variables %s", ', '.join(self.symbols.names()) or '(none)')

        log.info("pass 2: generating C")
        CodeGenerator(output).emit_program(program, self.symbols.names())
        return program

def read_source(path):
    try:
        with open(path) as f:
            return f.read()
    except OSError as e:
        raise ResourceError(f"cannot open file '{path}': {e.strerror or e}") from e

def compile_file(path, output_path=None, stdout=None, max_variables=MAX_VARIABLES):
    """Execute `path` and write its C translation; returns the output path."""
    source = read_source(path)
    output_path = output_path or path + OUTPUT_SUFFIX

    driver = Driver(source, stdout=stdout, max_variables=max_variables)
    program = driver.parse()
    try:
        with open(output_path, 'w') as out:
            driver.run(out, program)
    except OSError as e:
        raise ResourceError(f"cannot write output file '{output_path}': {e.strerror or e}") from e
    log.info("wrote %s", output_path)
    return output_path

# =============================================================================
#  8.  CLI  ────────────────────────────────────────────────────────────────────
# =============================================================================
def setup_logging(verbose):
    logging.basicConfig(format="[%(levelname)s] %(message)s")
    logging.getLogger().setLevel(logging.INFO if verbose else logging.WARNING)

class UsageParser(argparse.ArgumentParser):
    # Bad command lines print usage plus a sample program and exit 1.
    def error(self, message):
        self.print_usage(sys.stdout)
        print(f"{self.prog}: error: {message}")
        print("\nExample source code:")
        print(EXAMPLE_PROGRAM, end='')
        sys.exit(1)

def positive_int(text):
    try:
        n = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {n}")
    return n

def main(argv=None):
    ap = UsageParser(prog='calc-compiler',
                     description="Run a calculator program and translate it to C")
    ap.add_argument('file', help="source file to run and translate")
    ap.add_argument('-o', '--output', help=f"C output path (default: FILE{OUTPUT_SUFFIX})")
    ap.add_argument('--emit', choices=['c', 'ast', 'tokens'], default='c',
                    help="dump tokens or the AST instead of compiling")
    ap.add_argument('--max-variables', type=positive_int, default=MAX_VARIABLES,
                    help=f"symbol table capacity (default: {MAX_VARIABLES})")
    ap.add_argument('-v', '--verbose', action='store_true', help="log pipeline progress")
    args = ap.parse_args(argv)

    setup_logging(args.verbose)

    try:
        if args.emit == 'tokens':
            for tok in Lexer(read_source(args.file)).tokens():
                print(f"{tok.line}: {tok.kind} {tok.text!r}")
            return 0

        if args.emit == 'ast':
            print('\n'.join(parse(read_source(args.file)).walk()))
            return 0

        path = compile_file(args.file, args.output, max_variables=args.max_variables)
    except CalcError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Compilation complete. Output written to '{path}'")
    return 0

# =============================================================================
if __name__ == '__main__':
    sys.exit(main())
