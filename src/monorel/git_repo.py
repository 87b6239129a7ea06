"""Typed wrappers around the git operations used by the release workflow.

Every function lets `git.GitCommandError` propagate: a failing git command is
an external tool failure and is never retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from monorel.errors import NotAGitRepositoryError

if TYPE_CHECKING:
    from git.objects import Commit


@dataclass(frozen=True)
class RepoInfo:
    """Facts about the opened repository.

    Attributes:
        root: Root directory of the work tree.
        remote_url: URL of the configured remote, or an empty string.
        active_branch: Current branch name (None if detached).
    """

    root: Path
    remote_url: str
    active_branch: str | None


class RepoContext(NamedTuple):
    repo: Repo
    info: RepoInfo


@dataclass(frozen=True)
class CommitSummary:
    """One line of `git log --oneline`.

    Attributes:
        hexsha: Full commit id.
        summary: First line of the commit message.
    """

    hexsha: str
    summary: str

    @property
    def short_sha(self) -> str:
        return self.hexsha[:7]

    @classmethod
    def from_commit(cls, commit: Commit) -> CommitSummary:
        summary = commit.summary
        if isinstance(summary, bytes):
            summary = summary.decode('utf-8', errors='replace')
        return cls(hexsha=commit.hexsha, summary=summary)

    def __str__(self) -> str:
        return f'{self.short_sha} {self.summary}'


def active_branch(repo: Repo) -> str | None:
    """Return the checked-out branch name, or None for a detached HEAD."""
    try:
        return repo.active_branch.name
    except TypeError:
        return None


def open_repo(path: Path | None = None, *, remote_name: str = 'origin') -> RepoContext:
    """Open the git repository containing `path` (defaults to the cwd).

    Raises:
        NotAGitRepositoryError: If no work tree contains `path`.
    """
    start = path or Path.cwd()
    try:
        repo = Repo(start, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise NotAGitRepositoryError(start) from exc
    if repo.working_tree_dir is None:
        raise NotAGitRepositoryError(start)

    remote_url = ''
    if any(remote.name == remote_name for remote in repo.remotes):
        remote_url = repo.remote(remote_name).url

    info = RepoInfo(
        root=Path(repo.working_tree_dir),
        remote_url=remote_url,
        active_branch=active_branch(repo),
    )
    return RepoContext(repo=repo, info=info)


def has_tracked_changes(repo: Repo) -> bool:
    """Return True if tracked files have staged or unstaged changes."""
    return repo.is_dirty(index=True, working_tree=True, untracked_files=False)


def checkout(repo: Repo, ref: str) -> None:
    repo.git.checkout(ref)


def pull(repo: Repo, *, remote_name: str, branch: str) -> None:
    """Pull `branch` from `remote_name`, merging rather than rebasing."""
    repo.git.pull('--no-rebase', remote_name, branch)


def changed_paths(repo: Repo, base_ref: str, head_ref: str = 'HEAD') -> list[str]:
    """List paths that differ between `base_ref` and `head_ref`.

    Renames contribute both their old and their new path. Order follows git's
    diff output.
    """
    base = repo.commit(base_ref)
    head = repo.commit(head_ref)
    paths: list[str] = []
    for diff in base.diff(head):
        for path in (diff.a_path, diff.b_path):
            if path and path not in paths:
                paths.append(path)
    return paths


def commits_between(repo: Repo, base_ref: str, head_ref: str = 'HEAD') -> list[CommitSummary]:
    """Commits reachable from `head_ref` but not from `base_ref`, newest first."""
    return [CommitSummary.from_commit(commit) for commit in repo.iter_commits(f'{base_ref}..{head_ref}')]


def branch_exists(repo: Repo, branch: str) -> bool:
    """Return True if a local branch called `branch` exists."""
    return any(head.name == branch for head in repo.heads)


def remote_branch_exists(repo: Repo, *, remote_name: str, branch: str) -> bool:
    """Return True if `remote_name` currently has a branch called `branch`.

    Asks the remote directly, so stale or missing remote-tracking refs do not matter.
    """
    return bool(repo.git.ls_remote('--heads', remote_name, f'refs/heads/{branch}').strip())


def create_branch(repo: Repo, branch: str, *, start_point: str) -> None:
    """Create `branch` from `start_point` and check it out.

    Fails if `branch` already exists, even when it points at `start_point`.
    """
    repo.git.checkout('-b', branch, start_point)


def push_branch(
    repo: Repo,
    *,
    remote_name: str,
    branch: str,
    set_upstream: bool = False,
) -> None:
    args = ['--set-upstream'] if set_upstream else []
    repo.git.push(*args, remote_name, branch)


def merge_no_ff(repo: Repo, branch: str) -> None:
    """Merge `branch` into the checked-out branch, always creating a merge commit."""
    repo.git.merge('--no-ff', '--no-edit', branch)


def create_tag(repo: Repo, *, tag: str, message: str) -> None:
    """Create an annotated tag at HEAD.

    Fails if the tag already exists.
    """
    repo.create_tag(tag, message=message)


def push_tags(repo: Repo, *, remote_name: str) -> None:
    """Push every local tag to `remote_name`."""
    repo.git.push(remote_name, '--tags')
