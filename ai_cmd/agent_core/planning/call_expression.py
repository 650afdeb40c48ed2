from __future__ import annotations

"""Parser for provider-authored capability call expressions.

A call expression looks like::

    base_function.create_file_0(@@ai-arg@@"notes.txt", @@ai-arg@@outputList[0])

The parser is a pure syntactic transform. It never evaluates the content and
never raises for string input: malformed text yields a ``ParseFailure`` value.

Argument sub-grammars
---------------------

- *Tagged mode*: when the argument string contains ``@@ai-arg@@``, it is split
  on that marker and every segment is one argument. Arguments may then contain
  commas and quotes freely. The marker itself is not escapable.
- *Bare mode*: otherwise the argument string is split on commas that are not
  inside quotes.

In both modes each argument is trimmed, loses a trailing comma, and loses one
layer of matching quotes. An argument that reads ``outputList[<int>]`` is a
back-reference to an earlier step's output.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..schemas.domain import ARG_MARKER, OUTPUT_LIST_NAME, ROOT_NAMESPACE

QUOTE_CHARS = ("\"", "'", "`")

_BACK_REFERENCE = re.compile(rf"^{OUTPUT_LIST_NAME}\[(\d+)\]$")


@dataclass(frozen=True)
class LiteralArg:
    value: str


@dataclass(frozen=True)
class BackReference:
    """Placeholder for the output of the step at ``index`` in the current run."""

    index: int


Argument = Union[LiteralArg, BackReference]


@dataclass(frozen=True)
class CallExpression:
    namespace: str
    function_name: str
    args: Tuple[Argument, ...] = ()

    @property
    def raw_args(self) -> List[str]:
        """Argument text as written, with back-references rendered back to their literal form."""
        out: List[str] = []
        for arg in self.args:
            if isinstance(arg, BackReference):
                out.append(f"{OUTPUT_LIST_NAME}[{arg.index}]")
            else:
                out.append(arg.value)
        return out


@dataclass(frozen=True)
class ParseFailure:
    text: str
    reason: str


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] in QUOTE_CHARS and text[-1] == text[0]:
        return text[1:-1]
    return text


def _clean(segment: str) -> str:
    text = segment.strip()
    if text.endswith(","):
        text = text[:-1].rstrip()
    return _strip_quotes(text)


def _to_argument(text: str) -> Argument:
    match = _BACK_REFERENCE.match(text)
    if match:
        return BackReference(index=int(match.group(1)))
    return LiteralArg(value=text)


def _split_bare(arg_string: str) -> List[str]:
    """Split on commas outside quotes. Backslash escapes the next character inside quotes."""
    pieces: List[str] = []
    current: List[str] = []
    quote: str | None = None
    escaped = False
    for char in arg_string:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if quote is not None:
            if char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            current.append(char)
            continue
        if char in QUOTE_CHARS:
            quote = char
            current.append(char)
        elif char == ",":
            pieces.append("".join(current))
            current = []
        else:
            current.append(char)
    pieces.append("".join(current))
    return pieces


def split_arguments(arg_string: str) -> List[Argument]:
    """Split the text between the parentheses of a call into arguments."""
    if not arg_string.strip():
        return []
    if ARG_MARKER in arg_string:
        segments = arg_string.split(ARG_MARKER)
        # Text before the first marker is the separator-free lead-in.
        if not segments[0].strip():
            segments = segments[1:]
    else:
        segments = _split_bare(arg_string)
    return [_to_argument(_clean(segment)) for segment in segments]


def parse_call_expression(
    text: str, *, root_namespace: str = ROOT_NAMESPACE
) -> Union[CallExpression, ParseFailure]:
    """Parse ``text`` into a ``CallExpression``.

    Parameters
    ----------
    text:
        The step content, e.g. ``base_function.read_file_0("a.txt")``.
    root_namespace:
        Namespace used when the call has no ``namespace.`` prefix.

    Returns
    -------
    CallExpression | ParseFailure
    """
    if not isinstance(text, str):
        return ParseFailure(text=repr(text), reason="call expression must be a string")

    source = text.strip()
    open_idx = source.find("(")
    if open_idx < 0:
        return ParseFailure(text=text, reason="missing '('")
    close_idx = source.rfind(")")
    if close_idx < open_idx:
        return ParseFailure(text=text, reason="missing closing ')'")

    callee = source[:open_idx].strip()
    if callee.startswith("await "):
        callee = callee[len("await ") :].strip()
    namespace, _, function_name = callee.rpartition(".")
    namespace = namespace.strip() or root_namespace
    function_name = function_name.strip()
    if not function_name:
        return ParseFailure(text=text, reason="missing function name")

    args = split_arguments(source[open_idx + 1 : close_idx])
    return CallExpression(namespace=namespace, function_name=function_name, args=tuple(args))
