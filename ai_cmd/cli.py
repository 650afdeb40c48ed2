"""
ai-cmd - command line entry point

Run one request:

    ai-cmd "create a hello.txt containing hello world"

Start an interactive session (no prompt given, or ``-i``):

    ai-cmd
"""

import asyncio
from typing import Optional, Tuple

import click

from ai_cmd.console import Console
from ai_cmd.core.config import Settings, get_settings
from ai_cmd.core.logging_config import get_logger, setup_logging

from .agent_core.abstraction.base import CompletionProvider
from .agent_core.factory import build_context, build_service
from .agent_core.service import AICommandService

logger = get_logger(__name__)

EXIT_WORDS = ("exit", "quit")


async def _run_once(service: AICommandService, prompt: str) -> bool:
    try:
        await service.run(prompt)
        return True
    except Exception as e:
        service.context.console.error(f"Request failed: {e}")
        logger.debug("Request failed", exc_info=True)
        return False


async def _interactive(service: AICommandService) -> None:
    console = service.context.console
    console.info("Interactive mode. Type 'exit' to quit, 'clear' to forget the conversation.")
    while True:
        try:
            line = await asyncio.to_thread(click.prompt, ">", prompt_suffix=" ", default="", show_default=False)
        except (click.Abort, EOFError):
            click.echo()
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in EXIT_WORDS:
            break
        if text.lower() == "clear":
            service.clear_history()
            console.info("Conversation cleared.")
            continue
        await _run_once(service, text)


async def _main(
    settings: Settings,
    prompt: Optional[str],
    interactive: bool,
    completion: Optional[CompletionProvider] = None,
    console: Optional[Console] = None,
) -> int:
    service = await build_service(settings, completion=completion, console=console)
    if prompt:
        ok = await _run_once(service, prompt)
        if not ok and not interactive:
            return 1
    if interactive or not prompt:
        await _interactive(service)
    return 0


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("words", nargs=-1)
@click.option("-p", "--prompt", "prompt_option", type=str, help="Request to run (alternative to positional words)")
@click.option("-i", "--interactive", is_flag=True, help="Stay in an interactive session after the request")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (default: settings.log_level)",
)
@click.option("--show-plan", is_flag=True, help="Print the parsed plan before executing it")
@click.option("--list-capabilities", is_flag=True, help="Print the capability catalogue and exit")
@click.version_option(package_name="ai-cmd")
@click.pass_context
def cli(
    ctx: click.Context,
    words: Tuple[str, ...],
    prompt_option: Optional[str],
    interactive: bool,
    log_level: Optional[str],
    show_plan: bool,
    list_capabilities: bool,
) -> None:
    """
    Turn a natural-language request into steps and execute them.

    Provider settings come from AI_CMD_* environment variables or a .env file.
    """
    settings = get_settings()
    updates = {}
    if log_level:
        updates["log_level"] = log_level.upper()
    if show_plan:
        updates["output_ai_result"] = True
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(log_level=settings.log_level, log_format=settings.log_format, log_file_dir=settings.log_file_dir)

    completion = (ctx.obj or {}).get("completion")
    console = (ctx.obj or {}).get("console")

    if list_capabilities:
        context = build_context(settings, completion=completion, console=console)
        for line in context.registry.describe_all():
            click.echo(line)
        return

    prompt = prompt_option or " ".join(words).strip() or None
    code = asyncio.run(_main(settings, prompt, interactive, completion=completion, console=console))
    ctx.exit(code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
