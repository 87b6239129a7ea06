from __future__ import annotations

from typing import Annotated

import typer
from git import GitCommandError
from pydantic import ValidationError

from monorel import __version__
from monorel.errors import MonorelError, ReleaseAbortedError
from monorel.git_repo import open_repo
from monorel.prompts import TyperOperator
from monorel.release import ReleaseOrchestrator, ReleaseStatus
from monorel.settings import MonorelSettings

app = typer.Typer(help='Release the changed packages of a monorepo.')


def _version_callback(value: bool) -> None:  # noqa: FBT001
    if value:
        typer.echo(f'monorel {__version__}')
        raise typer.Exit


@app.command()
def release(
    commitish: Annotated[
        str | None,
        typer.Argument(
            help='Commit-ish to diff against and merge into (defaults to the configured base branch).',
            show_default=False,
        ),
    ] = None,
    *,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option(
            '--version',
            help='Show the version and exit.',
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Run the monorepo release workflow.

    Syncs the base and integration branches, reports the changed packages, cuts a
    dated `release/<YYYY-MM-DD>` branch, merges it back into both branches and
    tags every changed package, pausing at each manual checkpoint for confirmation.

    Args:
        commitish: Override for the base branch.
        version: If true, print the version and exit.

    Raises:
        typer.Exit: With code 1 on invalid configuration, a precondition or git failure, 0 on an operator abort.
    """
    try:
        settings = MonorelSettings()
        repo_context = open_repo(remote_name=settings.git_remote)
        orchestrator = ReleaseOrchestrator(
            repo_context=repo_context,
            settings=settings,
            operator=TyperOperator(),
        )
        result = orchestrator.run(commitish)
    except ReleaseAbortedError as exc:
        typer.secho('\nAborting. Bye bye o7', fg=typer.colors.YELLOW)
        raise typer.Exit(code=0) from exc
    except MonorelError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        typer.secho(f'Invalid configuration: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    except GitCommandError as exc:
        typer.secho(f'git command failed: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if result.status == ReleaseStatus.completed:
        typer.echo(f'Release branch: {result.release_branch}')
        for tag in result.tags:
            typer.echo(f'Tag: {tag}')


def main() -> None:
    """Main entry point for the CLI."""
    app()
