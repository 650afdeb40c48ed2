from __future__ import annotations

import json
from typing import List

import pytest

from ai_cmd.agent_core.errors import HookFailure
from ai_cmd.agent_core.planning.steps import Step, text_step
from ai_cmd.agent_core.plugins.base import BasePlugin, DefaultPlugin
from ai_cmd.agent_core.plugins.pipeline import HookPipeline
from ai_cmd.agent_core.schemas.domain import ChatMessage, StepKind


class _Upper(BasePlugin):
    async def on_after_ai_request(self, raw_reply: str):
        return raw_reply.upper()


class _Suffix(BasePlugin):
    def on_after_ai_request(self, raw_reply: str):
        return raw_reply + "!"


class _Broken(BasePlugin):
    async def on_after_ai_request(self, raw_reply: str):
        raise RuntimeError("plugin exploded")

    async def on_after_all_steps(self, steps, outputs):
        raise RuntimeError("observer exploded")


class _Silent(BasePlugin):
    async def on_after_ai_request(self, raw_reply: str):
        return None


class _Observer(BasePlugin):
    def __init__(self, context, seen: List[str]) -> None:
        super().__init__(context)
        self.seen = seen

    async def on_after_all_steps(self, steps, outputs):
        self.seen.append(self.name)
        return "ignored"


@pytest.mark.asyncio
async def test_transform_chain_runs_in_registration_order():
    pipeline = HookPipeline([_Upper(None), _Suffix(None)])  # type: ignore[arg-type]
    assert await pipeline.after_ai_request("reply") == "REPLY!"

    reversed_pipeline = HookPipeline([_Suffix(None), _Upper(None)])  # type: ignore[arg-type]
    assert await reversed_pipeline.after_ai_request("reply") == "REPLY!"


@pytest.mark.asyncio
async def test_none_result_leaves_value_unchanged():
    pipeline = HookPipeline([_Silent(None), _Suffix(None)])  # type: ignore[arg-type]
    assert await pipeline.after_ai_request("x") == "x!"


@pytest.mark.asyncio
async def test_failing_participant_is_isolated(console):
    pipeline = HookPipeline([_Upper(None), _Broken(None), _Suffix(None)], console=console)  # type: ignore[arg-type]
    assert await pipeline.after_ai_request("ok") == "OK!"
    assert len(pipeline.failures) == 1
    failure = pipeline.failures[0]
    assert isinstance(failure, HookFailure)
    assert (failure.plugin, failure.hook) == ("_Broken", "on_after_ai_request")
    assert console.of("error") == ["Error in plugin _Broken.on_after_ai_request: plugin exploded"]


@pytest.mark.asyncio
async def test_observers_all_run_even_when_one_fails(console):
    seen: List[str] = []
    pipeline = HookPipeline(console=console)
    pipeline.add(_Observer(None, seen))  # type: ignore[arg-type]
    pipeline.add(_Broken(None))  # type: ignore[arg-type]
    pipeline.add(_Observer(None, seen))  # type: ignore[arg-type]
    assert await pipeline.after_all_steps([], ()) is None
    assert seen == ["_Observer", "_Observer"]
    assert len(pipeline.failures) == 1


@pytest.mark.asyncio
async def test_after_parse_results_are_validated_into_steps():
    class _AddStep(BasePlugin):
        async def on_after_parse(self, steps):
            return list(steps) + [{"type": 3, "content": "ls"}]

    pipeline = HookPipeline([_AddStep(None)])  # type: ignore[arg-type]
    steps = await pipeline.after_parse([text_step("a")])
    assert [s.kind for s in steps] == [StepKind.text_answer, StepKind.shell_command]
    assert all(isinstance(s, Step) for s in steps)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["oops", {"type": 1, "content": "y"}, 7])
async def test_after_parse_rejects_results_that_are_not_step_lists(console, bad):
    class _WrongShape(BasePlugin):
        async def on_after_parse(self, steps):
            return bad

    pipeline = HookPipeline([_WrongShape(None)], console=console)  # type: ignore[arg-type]
    steps = await pipeline.after_parse([text_step("x")])
    assert [s.content for s in steps] == ["x"]
    assert len(pipeline.failures) == 1
    assert isinstance(pipeline.failures[0].cause, TypeError)


@pytest.mark.asyncio
async def test_before_step_rejects_unusable_replacements(console):
    class _Bad(BasePlugin):
        async def on_before_step(self, steps, index, step):
            return 42

    pipeline = HookPipeline([_Bad(None)], console=console)  # type: ignore[arg-type]
    original = text_step("keep")
    assert await pipeline.before_step([original], 0, original) is original
    assert len(pipeline.failures) == 1


@pytest.mark.asyncio
async def test_before_ai_request_accepts_message_dicts():
    class _Prepend(BasePlugin):
        async def on_before_ai_request(self, messages):
            return [{"role": "system", "content": "extra"}, *messages]

    pipeline = HookPipeline([_Prepend(None)])  # type: ignore[arg-type]
    result = await pipeline.before_ai_request([ChatMessage(role="user", content="hi")])
    assert [m.content for m in result] == ["extra", "hi"]
    assert all(isinstance(m, ChatMessage) for m in result)


@pytest.mark.asyncio
async def test_initialize_fires_each_plugin():
    calls: List[str] = []

    class _Init(BasePlugin):
        def on_initialize(self):
            calls.append("init")

    pipeline = HookPipeline([_Init(None), _Init(None)])  # type: ignore[arg-type]
    await pipeline.initialize()
    assert calls == ["init", "init"]


@pytest.mark.asyncio
async def test_default_plugin_echoes_plan_when_enabled(engine_context, console):
    plugin = DefaultPlugin(engine_context)
    steps = [text_step("a"), Step(kind=StepKind.shell_command, content="ls", description="list")]

    await plugin.on_after_parse(steps)
    assert console.of("info") == []

    engine_context.settings.output_ai_result = True
    assert await plugin.on_after_parse(steps) == steps
    echoed = json.loads(console.of("info")[0])
    assert echoed[1] == {"type": 3, "content": "ls", "description": "list"}


@pytest.mark.asyncio
async def test_default_plugin_skips_single_text_answer(engine_context, console):
    engine_context.settings.output_ai_result = True
    await DefaultPlugin(engine_context).on_after_parse([text_step("just text")])
    assert console.of("info") == []


def test_default_plugin_is_installed_first(engine_context):
    assert isinstance(engine_context.pipeline.plugins[0], DefaultPlugin)
