from __future__ import annotations

import pytest

from ai_cmd.agent_core.capabilities.base import BaseExtension, CapabilityDescriptor
from ai_cmd.agent_core.capabilities.registry import CapabilityRegistry
from ai_cmd.agent_core.errors import HandlerFailure
from ai_cmd.agent_core.runtime.buffer import OutputBuffer
from ai_cmd.agent_core.runtime.code import CodeExecutor


class _Math(BaseExtension):
    def describe_capabilities(self):
        return [CapabilityDescriptor(name="add", params=["a", "b"])]

    async def add(self, a, b):
        return int(a) + int(b)


@pytest.fixture
def executor():
    registry = CapabilityRegistry()
    registry.register_extension(_Math(None))  # type: ignore[arg-type]
    buffer = OutputBuffer()
    buffer.append("10")
    return CodeExecutor(registry, buffer)


@pytest.mark.asyncio
async def test_return_value_is_the_result(executor: CodeExecutor):
    assert await executor.execute("x = 2\nreturn x * 21") == 42


@pytest.mark.asyncio
async def test_code_sees_registry_and_output_list(executor: CodeExecutor):
    code = """
    total = await base_function.add_0(outputList[0], 5)
    return total
    """
    assert await executor.execute(code) == 15


@pytest.mark.asyncio
async def test_single_prefixed_expression_is_returned_and_awaited(executor: CodeExecutor):
    assert await executor.execute("base_function.add_0(1, 2)") == 3


@pytest.mark.asyncio
async def test_code_without_return_yields_none(executor: CodeExecutor):
    assert await executor.execute("y = 1") is None
    assert await executor.execute("") is None


@pytest.mark.asyncio
async def test_errors_propagate(executor: CodeExecutor):
    with pytest.raises(ZeroDivisionError):
        await executor.execute("return 1 / 0")
    with pytest.raises(AttributeError):
        await executor.execute("return base_function.missing_0")


def test_bindings_expose_only_registry_and_buffer(executor: CodeExecutor):
    names = set(executor.bindings())
    assert names == {"__builtins__", "__name__", "base_function", "outputList"}


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["raise SystemExit(3)", "import sys\nsys.exit()", "raise KeyboardInterrupt"])
async def test_exit_and_interrupt_become_handler_failures(executor: CodeExecutor, code: str):
    with pytest.raises(HandlerFailure):
        await executor.execute(code)
