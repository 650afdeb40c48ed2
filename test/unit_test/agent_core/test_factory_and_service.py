from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from ai_cmd.agent_core.capabilities.builtin import DefaultExtension
from ai_cmd.agent_core.factory import build_context, build_service
from ai_cmd.agent_core.plugins.base import DefaultPlugin
from ai_cmd.agent_core.runtime.models import DispatcherState
from ai_cmd.agent_core.service import AICommandService

EXTENSION_SOURCE = '''
from ai_cmd.agent_core.capabilities.base import BaseExtension, CapabilityDescriptor


class Extension(BaseExtension):
    def describe_capabilities(self):
        return [CapabilityDescriptor(name="read_file", params=["path"], description="shadowing read")]

    def read_file(self, path):
        return "custom:" + path
'''

PLUGIN_SOURCE = '''
from ai_cmd.agent_core.plugins.base import BasePlugin

INITIALIZED = []


class Plugin(BasePlugin):
    async def on_initialize(self):
        INITIALIZED.append(self.name)

    async def on_after_ai_request(self, raw_reply):
        return raw_reply.replace("PLACEHOLDER", "patched")
'''


def _plan(*steps) -> str:
    return json.dumps([{"type": t, "content": c, "description": d} for t, c, d in steps])


def test_build_context_loads_configured_extensions_and_plugins(settings, console, completion, tmp_path: Path):
    (tmp_path / "my_ext.py").write_text(EXTENSION_SOURCE)
    (tmp_path / "my_plugin.py").write_text(PLUGIN_SOURCE)
    settings.extensions = [str(tmp_path / "my_ext.py")]
    settings.plugins = [f"{tmp_path / 'my_plugin.py'}:Plugin"]

    context = build_context(settings, completion=completion, console=console)

    assert isinstance(context.registry.extensions[0], DefaultExtension)
    assert context.registry.resolve("read_file_0") is not None
    assert context.registry.resolve("read_file_1").handler("x") == "custom:x"
    assert [type(p).__name__ for p in context.pipeline.plugins] == ["DefaultPlugin", "Plugin"]
    assert console.of("error") == []


def test_broken_references_are_reported_and_skipped(settings, console, completion, tmp_path: Path):
    settings.extensions = ["no_such_module_for_ai_cmd:Extension", str(tmp_path / "missing.py")]
    settings.plugins = ["ai_cmd.agent_core.plugins.base:DefaultExtension"]

    context = build_context(settings, completion=completion, console=console)

    assert len(context.registry.extensions) == 1
    assert len(context.pipeline.plugins) == 1
    assert isinstance(context.pipeline.plugins[0], DefaultPlugin)
    errors = console.of("error")
    assert len(errors) == 3
    assert errors[0].startswith("Failed to load extension no_such_module_for_ai_cmd:Extension")


@pytest.mark.asyncio
async def test_build_service_fires_on_initialize_once(settings, console, completion, tmp_path: Path):
    (tmp_path / "init_plugin.py").write_text(PLUGIN_SOURCE)
    settings.plugins = [str(tmp_path / "init_plugin.py")]
    service = await build_service(settings, completion=completion, console=console)
    await service.initialize()
    plugin = service.context.pipeline.plugins[1]
    module = sys.modules[type(plugin).__module__]
    assert module.INITIALIZED == ["Plugin"]


@pytest.mark.asyncio
async def test_run_executes_the_plan_and_records_history(engine_context, completion, console, in_tmp_cwd: Path):
    reply = _plan(
        (2, 'base_function.create_file_0(@@ai-arg@@"out.txt", @@ai-arg@@"data")', "create"),
        (2, 'base_function.read_file_0(@@ai-arg@@"out.txt")', "read"),
    )
    completion.replies = [reply]
    service = AICommandService(engine_context)
    outcome = await service.run("make a file")

    assert outcome.state is DispatcherState.done
    assert outcome.outputs == (True, "data")
    assert (in_tmp_cwd / "out.txt").read_text() == "data"
    assert console.of("info")[0] == "Executing steps..."
    assert console.of("success")[-1] == "Execution completed."
    assert [(m.role, m.content) for m in service.history] == [
        ("user", "make a file"),
        ("assistant", reply),
    ]


@pytest.mark.asyncio
async def test_messages_carry_system_prompt_history_and_catalogue(engine_context, completion):
    completion.replies = ["plain answer one", "plain answer two"]
    service = AICommandService(engine_context)
    await service.run("first")
    await service.run("second")

    messages = completion.requests[1]
    assert [m.role for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[1].content == "first"
    assert messages[2].content == "plain answer one"
    assert 'User request: "second"' in messages[3].content
    assert "read_file_0(file_path)" in messages[3].content

    service.clear_history()
    assert service.history == ()


@pytest.mark.asyncio
async def test_single_text_answer_has_no_progress_lines(engine_context, completion, console):
    completion.replies = ["Paris is the capital of France."]
    outcome = await AICommandService(engine_context).run("capital of france?")
    assert outcome.outputs == ("Paris is the capital of France.",)
    assert "Execution completed." not in console.of("success")
    assert "Executing steps..." not in console.of("info")


@pytest.mark.asyncio
async def test_provider_errors_propagate(engine_context, completion):
    completion.replies = [RuntimeError("provider down")]
    service = AICommandService(engine_context)
    with pytest.raises(RuntimeError, match="provider down"):
        await service.run("anything")
    assert service.history == ()


@pytest.mark.asyncio
async def test_recurse_step_starts_a_nested_run(engine_context, completion):
    completion.replies = [
        _plan((1, "step one", ""), (5, "now do the rest", ""), (1, "skipped", "")),
        _plan((1, "nested answer", "")),
    ]
    service = AICommandService(engine_context)
    outcome = await service.run("start")

    assert outcome.state is DispatcherState.recursing
    assert outcome.outputs == ("step one",)
    assert 'User request: "now do the rest"' in completion.requests[1][-1].content
    assert [m.content for m in service.history if m.role == "user"] == ["now do the rest", "start"]


@pytest.mark.asyncio
async def test_recursion_depth_is_limited(engine_context, completion, console):
    engine_context.settings.max_recursion_depth = 1
    looping = _plan((5, "again", ""), (1, "after refusal", ""))
    completion.replies = [looping, looping]
    outcome = await AICommandService(engine_context).run("loop")

    assert outcome.state is DispatcherState.recursing
    assert len(completion.requests) == 2
    assert any("maximum recursion depth 1" in line for line in console.of("error"))
    assert "after refusal" in console.of("success")


@pytest.mark.asyncio
async def test_nested_provider_failure_is_reported(engine_context, completion, console):
    completion.replies = [_plan((5, "nested", "")), RuntimeError("nested down")]
    outcome = await AICommandService(engine_context).run("outer")
    assert outcome.state is DispatcherState.recursing
    assert any("nested down" in line for line in console.of("error"))
