import pytest
from kestrel.ast import (
    IntegerLiteral, FloatLiteral, Identifier, BinaryExpression,
    AssignmentExpression, VariableDeclaration, Scope, Arguments, FunctionCall,
)
from kestrel.errors import KestrelError, KestrelParseError
from kestrel.lexer import tokenize
from kestrel.parser import generate_ast, parse_program


def parse(source):
    program, errors = generate_ast(tokenize(source))
    assert errors == []
    return program.body


def parse_errors(source):
    program, errors = generate_ast(tokenize(source))
    return program, errors


def num(value):
    return IntegerLiteral(value)


def test_declaration():
    assert parse('let a = (3 + 5)') == [
        VariableDeclaration(Identifier('a'), BinaryExpression(num(3), '+', num(5))),
    ]


def test_multiplication_binds_tighter():
    assert parse('1 + 2 * 3') == [
        BinaryExpression(num(1), '+', BinaryExpression(num(2), '*', num(3))),
    ]


def test_additive_is_left_associative():
    assert parse('8 - 3 - 2') == [
        BinaryExpression(BinaryExpression(num(8), '-', num(3)), '-', num(2)),
    ]


def test_exponent_shares_multiplicative_tier():
    assert parse('2 ^ 3 * 2') == [
        BinaryExpression(BinaryExpression(num(2), '^', num(3)), '*', num(2)),
    ]


def test_parentheses_override_precedence():
    assert parse('(1 + 2) * 3.5') == [
        BinaryExpression(BinaryExpression(num(1), '+', num(2)), '*', FloatLiteral(3.5)),
    ]


def test_plain_and_compound_assignment():
    assert parse('a = 1 a += 3 b ^= 2') == [
        AssignmentExpression(Identifier('a'), '=', num(1)),
        AssignmentExpression(Identifier('a'), '+', num(3)),
        AssignmentExpression(Identifier('b'), '^', num(2)),
    ]


def test_calls():
    assert parse('print() f(1, a + 2)') == [
        FunctionCall(Identifier('print'), Arguments([])),
        FunctionCall(Identifier('f'), Arguments([
            num(1), BinaryExpression(Identifier('a'), '+', num(2)),
        ])),
    ]


def test_nested_call_argument():
    assert parse('f(g(1))') == [
        FunctionCall(Identifier('f'), Arguments([
            FunctionCall(Identifier('g'), Arguments([num(1)])),
        ])),
    ]


def test_brace_group_is_nested_scope():
    assert parse('{ let a = 1 { a } } {}') == [
        Scope([
            VariableDeclaration(Identifier('a'), num(1)),
            Scope([Identifier('a')]),
        ]),
        Scope([]),
    ]


def test_nodes_carry_positions():
    decl, = parse('\n  let a = 1 + x')
    assert (decl.line, decl.column) == (2, 3)
    assert (decl.value.line, decl.value.column) == (2, 13)
    assert (decl.value.right.line, decl.value.right.column) == (2, 15)


@pytest.mark.parametrize('source', ['let a', 'let a += 1', 'let 3', 'let f()'])
def test_let_requires_plain_assignment(source):
    _, errors = parse_errors(source)
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message == 'expected variable assignment'


def test_let_with_non_identifier_target_still_parses():
    # rejected later by the evaluator
    assert parse('let 3 = 4') == [VariableDeclaration(num(3), num(4))]


@pytest.mark.parametrize('keyword', ['if', 'else', 'while', 'for'])
def test_unknown_keyword(keyword):
    program, errors = parse_errors(f'{keyword} 1')
    assert len(errors) == 1
    assert errors[0].name == 'NameError'
    assert errors[0].message == f"unknown keyword '{keyword}'"
    # the keyword is consumed; the rest of the line still parses
    assert program.body == [num(1)]


def test_missing_close_paren():
    _, errors = parse_errors('(1 + 2')
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message == "expected ')' but found end of input"


def test_wrong_token_instead_of_close_paren():
    _, errors = parse_errors('(1 + 2 ]')
    assert errors[0].message == "expected ')' but found ']'"
    assert (errors[0].line, errors[0].column) == (1, 8)


def test_dangling_comma_in_arguments():
    _, errors = parse_errors('f(1,)')
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message == "expected an expression after ','"


def test_unclosed_argument_list():
    _, errors = parse_errors('f(1 2')
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message.startswith("expected ')' to close the call to 'f'")


def test_unclosed_brace():
    _, errors = parse_errors('{ let a = 1')
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message == "expected '}' but found end of input"


@pytest.mark.parametrize('source,message', [
    ('[1]', "unexpected token '['"),
    ('a = .', "unexpected token '.'"),
    ('1 +', 'unexpected token end of input'),
    ('let a = if', "unexpected token 'if'"),
])
def test_unexpected_tokens(source, message):
    _, errors = parse_errors(source)
    assert errors[0].name == 'SyntaxError'
    assert errors[0].message == message


def test_error_position_comes_from_token():
    _, errors = parse_errors('let a = 3 +\n  )')
    assert (errors[0].line, errors[0].column) == (2, 3)


def test_errors_accumulate_per_statement():
    program, errors = parse_errors('let a = ) let b = 2 while let c = 3')
    assert [e.name for e in errors] == ['SyntaxError', 'NameError']
    assert program.body == [
        VariableDeclaration(Identifier('b'), num(2)),
        VariableDeclaration(Identifier('c'), num(3)),
    ]


def test_parser_always_makes_progress():
    program, errors = parse_errors(') ) , }')
    assert len(errors) == 4
    assert program.body == []


def test_integer_literal_out_of_range():
    _, errors = parse_errors(str(2 ** 127))
    assert errors[0].name == 'SyntaxError'
    assert 'out of range' in errors[0].message
    assert parse(str(2 ** 127 - 1)) == [num(2 ** 127 - 1)]


def test_nesting_limit():
    depth = 150
    program, errors = parse_errors('(' * depth + '1' + ')' * depth)
    assert errors[0].name == 'Error'
    assert errors[0].message == 'recursion too deep'


def test_missing_eof_is_tolerated():
    tokens = tokenize('1 + 2')[:-1]
    program, errors = generate_ast(tokens)
    assert errors == []
    assert program.body == [BinaryExpression(num(1), '+', num(2))]
    assert generate_ast([]) == (Scope([]), [])


def test_parse_program_raises_all_errors():
    with pytest.raises(KestrelParseError) as exc_info:
        parse_program('let a = ) if')
    assert [e.name for e in exc_info.value.errors] == ['SyntaxError', 'NameError']
    assert exc_info.value.err == exc_info.value.errors[0]


def test_parse_program_propagates_lexer_errors():
    with pytest.raises(KestrelError) as exc_info:
        parse_program('let a = 1.2.3')
    assert not isinstance(exc_info.value, KestrelParseError)
    assert exc_info.value.err.name == 'SyntaxError'
