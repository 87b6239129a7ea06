from __future__ import annotations

from typing import Protocol

import typer


class Operator(Protocol):
    """The human driving the release: answers checkpoints and reads progress."""

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; only an explicit yes returns True."""
        ...

    def info(self, message: str) -> None: ...

    def item(self, message: str) -> None: ...

    def notice(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...


class TyperOperator:
    """Operator backed by the terminal through typer prompts and colours."""

    def confirm(self, question: str) -> bool:
        # Blocks until answered; an empty answer counts as "no".
        return typer.confirm(question, default=False)

    def info(self, message: str) -> None:
        typer.echo(message)

    def item(self, message: str) -> None:
        typer.secho(f'  {message}', fg=typer.colors.CYAN)

    def notice(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.YELLOW)

    def success(self, message: str) -> None:
        typer.secho(f'✓ {message}', fg=typer.colors.GREEN)
