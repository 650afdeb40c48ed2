"""Planning components.

The completion provider authors a *plan*: a JSON array of steps, each with an
integer ``type`` code, a ``content`` string and a ``description``. This
package turns the raw reply into ``Step`` models and parses the content of
capability-call steps into ``CallExpression`` values.

Neither module executes anything; execution is the job of
``ai_cmd.agent_core.runtime``.
"""

from .call_expression import (
    Argument,
    BackReference,
    CallExpression,
    LiteralArg,
    ParseFailure,
    parse_call_expression,
)
from .steps import Step, coerce_step, normalize_plan, parse_reply, text_step

__all__ = [
    "Argument",
    "BackReference",
    "CallExpression",
    "LiteralArg",
    "ParseFailure",
    "Step",
    "coerce_step",
    "normalize_plan",
    "parse_call_expression",
    "parse_reply",
    "text_step",
]
