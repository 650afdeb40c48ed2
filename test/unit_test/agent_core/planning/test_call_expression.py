from __future__ import annotations

import pytest

from ai_cmd.agent_core.planning.call_expression import (
    BackReference,
    CallExpression,
    LiteralArg,
    ParseFailure,
    parse_call_expression,
    split_arguments,
)


def test_tagged_arguments_with_namespace():
    call = parse_call_expression('ns.fn(@@ai-arg@@"a", @@ai-arg@@"b")')
    assert isinstance(call, CallExpression)
    assert call.namespace == "ns"
    assert call.function_name == "fn"
    assert call.raw_args == ["a", "b"]


def test_missing_namespace_defaults_to_root():
    call = parse_call_expression('fn("x")')
    assert isinstance(call, CallExpression)
    assert call.namespace == "base_function"
    assert call.function_name == "fn"
    assert call.args == (LiteralArg("x"),)


def test_custom_root_namespace():
    call = parse_call_expression("fn()", root_namespace="tools")
    assert isinstance(call, CallExpression)
    assert call.namespace == "tools"
    assert call.args == ()


def test_leading_await_is_ignored():
    call = parse_call_expression('await base_function.read_file_0(@@ai-arg@@"a.txt")')
    assert isinstance(call, CallExpression)
    assert call.namespace == "base_function"
    assert call.function_name == "read_file_0"
    assert call.raw_args == ["a.txt"]


def test_tagged_arguments_keep_commas_and_inner_quotes():
    text = 'base_function.create_file_0(@@ai-arg@@"a.txt", @@ai-arg@@"x = f(1, 2)\nprint(\'hi\')")'
    call = parse_call_expression(text)
    assert isinstance(call, CallExpression)
    assert call.function_name == "create_file_0"
    assert call.raw_args == ["a.txt", "x = f(1, 2)\nprint('hi')"]


def test_tagged_argument_drops_single_trailing_comma_and_quote_layer():
    assert split_arguments('@@ai-arg@@ `tick` , @@ai-arg@@\'single\'') == [
        LiteralArg("tick"),
        LiteralArg("single"),
    ]


def test_bare_mode_splits_on_commas_outside_quotes():
    call = parse_call_expression('base_function.rename_0("a,b.txt", \'c.txt\')')
    assert isinstance(call, CallExpression)
    assert call.raw_args == ["a,b.txt", "c.txt"]


def test_back_reference_is_detected_in_both_modes():
    tagged = parse_call_expression('base_function.request_ai_0(@@ai-arg@@"", @@ai-arg@@"outputList[1]")')
    bare = parse_call_expression("base_function.read_file_0(outputList[0])")
    assert isinstance(tagged, CallExpression)
    assert tagged.args == (LiteralArg(""), BackReference(1))
    assert isinstance(bare, CallExpression)
    assert bare.args == (BackReference(0),)
    assert bare.raw_args == ["outputList[0]"]


def test_back_reference_requires_whole_argument():
    call = parse_call_expression('fn("see outputList[0]")')
    assert isinstance(call, CallExpression)
    assert call.args == (LiteralArg("see outputList[0]"),)


def test_marker_inside_literal_is_split():
    call = parse_call_expression('fn(@@ai-arg@@"a @@ai-arg@@ b")')
    assert isinstance(call, CallExpression)
    assert len(call.args) == 2


@pytest.mark.parametrize(
    "text,reason",
    [
        ("no parentheses here", "missing '('"),
        ("fn)(", "missing closing ')'"),
        ("ns.(1)", "missing function name"),
        ("(1)", "missing function name"),
    ],
)
def test_malformed_text_returns_parse_failure(text: str, reason: str):
    result = parse_call_expression(text)
    assert isinstance(result, ParseFailure)
    assert result.reason == reason
    assert result.text == text


@pytest.mark.parametrize("text", ["", "   ", "(((", ")))", "@@ai-arg@@", 'a.b.c("x"', "fn(\"unterminated)"])
def test_never_raises_for_string_input(text: str):
    parse_call_expression(text)


def test_non_string_input_is_a_parse_failure():
    assert isinstance(parse_call_expression(None), ParseFailure)  # type: ignore[arg-type]


def test_blank_argument_string_has_no_arguments():
    call = parse_call_expression("base_function.get_file_name_list_0(   )")
    assert isinstance(call, CallExpression)
    assert call.args == ()
