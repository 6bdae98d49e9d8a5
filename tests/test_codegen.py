import io

import pytest

from calc_compiler import CodeGenerator, Driver, ParseError, parse


def render(expr_source):
    gen = CodeGenerator(io.StringIO())
    return gen.emit_expr(parse(f"print {expr_source}").statements[0].value)


def translate(source):
    stdout, output = io.StringIO(), io.StringIO()
    driver = Driver(source, stdout=stdout)
    driver.run(output)
    return stdout.getvalue(), output.getvalue(), driver


def test_expressions_are_fully_parenthesized():
    assert render("(2 + 3) * 4") == "((2 + 3) * 4)"
    assert render("x + y * 2") == "(x + (y * 2))"
    assert render("1 - 2 - 3") == "((1 - 2) - 3)"
    assert render("((7))") == "7"
    assert render("a / (b - c)") == "(a / (b - c))"


def test_literals_are_written_in_decimal():
    assert render("010") == "10"
    assert render("09 + 0") == "(9 + 0)"
    assert render("000") == "0"


def test_c_reserved_names_are_renamed_everywhere():
    stdout, c_source, driver = translate("int = 5\nprintf = int * 2\nprint printf + int\n")
    assert stdout == "15\n"
    assert driver.symbols.names() == ['int', 'printf']
    assert "    int _int, _printf;\n" in c_source
    assert "    _int = 5;\n" in c_source
    assert "    _printf = (_int * 2);\n" in c_source
    assert '    printf("%d\\n", (_printf + _int));\n' in c_source


def test_ordinary_names_are_unchanged():
    assert render("integer + main_value + x") == "((integer + main_value) + x)"


def test_full_translation():
    stdout, c_source, _ = translate("x = 10\ny = 20\nz = x + y * 2\nprint z\n")
    assert stdout == "50\n"
    assert c_source == (
        '#include <stdio.h>\n'
        '\n'
        'int main() {\n'
        '    int x, y, z;\n'
        '\n'
        '    x = 10;\n'
        '    y = 20;\n'
        '    z = (x + (y * 2));\n'
        '    printf("%d\\n", z);\n'
        '    return 0;\n'
        '}\n'
    )


def test_reassigned_variable_declared_once():
    stdout, c_source, _ = translate("a = 5\na = a + 1\nprint a")
    assert stdout == "6\n"
    assert "    int a;\n" in c_source
    assert c_source.count("    a = ") == 2


def test_declaration_order_follows_first_assignment():
    _, c_source, driver = translate("c = 1\na = 2\nc = 3\nb = a + c\na = 0")
    assert "    int c, a, b;\n" in c_source
    assert driver.symbols.names() == ['c', 'a', 'b']


def test_program_without_variables_has_no_declaration():
    stdout, c_source, _ = translate("print 2 * 21")
    assert stdout == "42\n"
    assert "int ;" not in c_source
    assert c_source == (
        '#include <stdio.h>\n'
        '\n'
        'int main() {\n'
        '    printf("%d\\n", (2 * 21));\n'
        '    return 0;\n'
        '}\n'
    )


def test_statements_keep_source_order():
    _, c_source, _ = translate("x = 1; print x; x = 2; print x")
    body = [line.strip() for line in c_source.splitlines()[5:-2]]
    assert body == [
        'x = 1;',
        'printf("%d\\n", x);',
        'x = 2;',
        'printf("%d\\n", x);',
    ]


def test_parse_error_writes_nothing():
    output = io.StringIO()
    with pytest.raises(ParseError):
        Driver("x = 1\nprint (x", stdout=io.StringIO()).run(output)
    assert output.getvalue() == ""


def test_generation_does_not_evaluate():
    gen = CodeGenerator(io.StringIO())
    gen.emit_stmt(parse("print 1 / 0").statements[0])
    assert gen.output.getvalue() == '    printf("%d\\n", (1 / 0));\n'
