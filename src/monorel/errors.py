from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class MonorelError(Exception):
    """Base error for monorel.

    Every subclass is a precondition failure: it is reported to the operator
    and the process exits with status 1.
    """


class NotAGitRepositoryError(MonorelError):
    """Raised when the working directory is not inside a git work tree."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Not a git repository: {path}')


class DirtyWorkspaceError(MonorelError):
    """Raised when tracked files have uncommitted changes."""

    def __init__(self) -> None:
        super().__init__(
            "You've got uncommitted changes, please investigate and try again.",
        )


class ReleaseBranchExistsError(MonorelError):
    """Raised when the dated release branch already exists."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(
            f'Failed to create branch {branch}. Branch already exists.',
        )


class ReleaseBranchMissingError(MonorelError):
    """Raised when a step needs the release branch before it was created."""

    def __init__(self, step: str) -> None:
        self.step = step
        super().__init__(
            f"Didn't create a release branch. Can't continue with: {step}.",
        )


class ReleaseAbortedError(Exception):
    """Raised when the operator declines a checkpoint.

    Not a `MonorelError`: an abort is a controlled, successful termination.
    """

    def __init__(self, question: str) -> None:
        self.question = question
        super().__init__(f'Release aborted at: {question}')
