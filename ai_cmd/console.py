"""User-visible output channel.

Answers, step descriptions and failure lines are written here rather than to
the logging tree, so they stay readable regardless of the configured log level.
"""

import asyncio
import random

import click

INFO_COLOR = "cyan"
SUCCESS_COLOR = "green"
ERROR_COLOR = "red"


class Console:
    """Colored terminal output built on ``click``."""

    def info(self, message: str) -> None:
        click.secho(message, fg=INFO_COLOR)

    def success(self, message: str) -> None:
        click.secho(message, fg=SUCCESS_COLOR)

    def error(self, message: str) -> None:
        click.secho(message, fg=ERROR_COLOR, err=True)

    def plain(self, message: str) -> None:
        click.echo(message)

    async def stream(self, text: str, delay_ms: int = 10) -> None:
        """Write ``text`` one character at a time with a small random jitter."""
        for char in text:
            click.secho(char, fg=SUCCESS_COLOR, nl=False)
            await asyncio.sleep((delay_ms + random.random() * 20) / 1000)
        click.echo()
