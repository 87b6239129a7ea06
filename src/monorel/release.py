from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from monorel.changes import top_level_directories
from monorel.errors import (
    DirtyWorkspaceError,
    ReleaseAbortedError,
    ReleaseBranchExistsError,
    ReleaseBranchMissingError,
)
from monorel.git_repo import (
    branch_exists,
    changed_paths,
    checkout,
    commits_between,
    create_branch,
    create_tag,
    has_tracked_changes,
    merge_no_ff,
    pull,
    push_branch,
    push_tags,
    remote_branch_exists,
)
from monorel.version_tags import collect_package_tags

if TYPE_CHECKING:
    from collections.abc import Callable

    from monorel.git_repo import RepoContext
    from monorel.prompts import Operator
    from monorel.settings import MonorelSettings


class ReleaseStatus(StrEnum):
    """How a release run ended without an error."""

    completed = 'completed'
    nothing_to_release = 'nothing_to_release'


@dataclass
class ReleaseContext:
    """State threaded through the release steps of a single run.

    Attributes:
        base_ref: Commit-ish the release is diffed against and merged into.
        release_branch_name: Name of the created release branch, empty until created.
        changed_directories: Top-level directories changed since `base_ref`, first-seen order.
        tags: Package tags created during the run.
    """

    base_ref: str
    release_branch_name: str = ''
    changed_directories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def require_release_branch(self, step: str) -> str:
        """Return the release branch name, failing if it was never created."""
        if not self.release_branch_name:
            raise ReleaseBranchMissingError(step)
        return self.release_branch_name


@dataclass(frozen=True)
class ReleaseResult:
    """Summary of a release run.

    Attributes:
        status: Whether the release completed or there was nothing to release.
        release_branch: The release branch, or None if none was created.
        changed_directories: Directories that were part of the release.
        tags: Tags created and pushed.
    """

    status: ReleaseStatus
    release_branch: str | None
    changed_directories: list[str]
    tags: list[str]

    @classmethod
    def from_context(cls, context: ReleaseContext, status: ReleaseStatus) -> ReleaseResult:
        return cls(
            status=status,
            release_branch=context.release_branch_name or None,
            changed_directories=list(context.changed_directories),
            tags=list(context.tags),
        )


def _utc_now() -> datetime:
    return datetime.now(UTC)


def release_branch_name(*, prefix: str = 'release/', now: datetime) -> str:
    """Name the release branch after the UTC date of `now` (`release/YYYY-MM-DD`)."""
    return f'{prefix}{now.astimezone(UTC):%Y-%m-%d}'


class ReleaseOrchestrator:
    """Run the release procedure step by step.

    Each step either completes, raises a `MonorelError` (precondition failure),
    lets a `git.GitCommandError` propagate (external failure), or raises
    `ReleaseAbortedError` when the operator declines a checkpoint. Nothing done
    before a failure or abort is rolled back.
    """

    def __init__(
        self,
        *,
        repo_context: RepoContext,
        settings: MonorelSettings,
        operator: Operator,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = repo_context.repo
        self._root = repo_context.info.root
        self._settings = settings
        self._operator = operator
        self._clock = clock or _utc_now

    def run(self, base_ref: str | None = None) -> ReleaseResult:
        """Execute the whole release, from workspace check to merge-back."""
        settings = self._settings
        context = ReleaseContext(base_ref=base_ref or settings.base_branch)

        self.verify_clean_workspace()
        self.sync_ref(context.base_ref)
        self.sync_ref(settings.integration_branch)

        self.report_changed_directories(context)
        if not context.changed_directories:
            self._operator.notice('No changes! Release is not necessary.')
            return ReleaseResult.from_context(context, ReleaseStatus.nothing_to_release)

        self.report_commit_diff(context)
        self.create_release_branch(context)

        self.checkpoint(
            'Did the release branch pass its build?',
            instructions='Go to CI and make sure that the release branch passes its build.',
        )
        self.checkpoint(
            'Did you finish testing? "No" will cancel the release process.',
            instructions=(
                'Proceed with testing the packages that are going to be released. '
                "Come back here when you're done."
            ),
        )
        self.confirm_version_bump(context)

        self.merge_release_branch(context, target=context.base_ref)
        self.checkpoint(
            f'Did the {context.base_ref} build pass and did the packages get released?',
            instructions='Go to CI and make sure that the builds passed for all of the packages being released.',
        )

        self.create_tags(context)

        self.merge_release_branch(context, target=settings.integration_branch)
        self.checkpoint(
            f'Did the {settings.integration_branch} build pass?',
            instructions='Make sure that the builds on CI passed.',
        )

        self._operator.success("You're now done! Awesome work!")
        return ReleaseResult.from_context(context, ReleaseStatus.completed)

    def checkpoint(self, question: str, *, instructions: str | None = None) -> None:
        """Stop the release unless the operator explicitly confirms `question`."""
        if instructions:
            self._operator.info(instructions)
        if not self._operator.confirm(question):
            raise ReleaseAbortedError(question)

    def verify_clean_workspace(self) -> None:
        if has_tracked_changes(self._repo):
            raise DirtyWorkspaceError

    def sync_ref(self, ref: str) -> None:
        """Check out `ref` and pull the latest changes from the remote."""
        self._operator.notice(f'Checking out {ref}')
        checkout(self._repo, ref)
        pull(self._repo, remote_name=self._settings.git_remote, branch=ref)

    def report_changed_directories(self, context: ReleaseContext) -> None:
        """Compute the changed top-level directories once and display them."""
        paths = changed_paths(self._repo, context.base_ref)
        context.changed_directories = top_level_directories(paths)
        self._operator.info('Folders with changes:')
        self._show_directories(context)

    def report_commit_diff(self, context: ReleaseContext) -> None:
        self._operator.info(f'Getting commit diff to {context.base_ref}')
        for commit in commits_between(self._repo, context.base_ref):
            self._operator.item(str(commit))

    def create_release_branch(self, context: ReleaseContext) -> None:
        """Cut the dated release branch from the integration ref and push it."""
        branch = release_branch_name(
            prefix=self._settings.release_branch_prefix,
            now=self._clock(),
        )
        self._operator.info(f'Creating release branch: {branch}')
        self.checkpoint('Do you want to continue?')

        remote_name = self._settings.git_remote
        if branch_exists(self._repo, branch) or remote_branch_exists(
            self._repo,
            remote_name=remote_name,
            branch=branch,
        ):
            raise ReleaseBranchExistsError(branch)
        create_branch(
            self._repo,
            branch,
            start_point=self._settings.integration_branch,
        )
        context.release_branch_name = branch
        self._operator.success(f'Created release branch: {branch}')

        self._operator.info(f'Pushing the newly created {branch} branch')
        push_branch(
            self._repo,
            remote_name=remote_name,
            branch=branch,
            set_upstream=True,
        )

    def confirm_version_bump(self, context: ReleaseContext) -> None:
        self._operator.info('It is now time to bump the versions of the packages that are going to be released.')
        self._operator.info('The packages that need updating are:')
        self._show_directories(context)
        self.checkpoint(
            'Did you update the versions? "No" will cancel the release process.',
            instructions='Update the versions and check back here after to continue the release process.',
        )

    def merge_release_branch(self, context: ReleaseContext, *, target: str) -> None:
        """Merge the release branch into `target` with a merge commit and push."""
        branch = context.require_release_branch(f'merge into {target}')
        self._operator.info(f'Merging {branch} into {target}')
        checkout(self._repo, target)
        merge_no_ff(self._repo, branch)
        push_branch(self._repo, remote_name=self._settings.git_remote, branch=target)

    def create_tags(self, context: ReleaseContext) -> None:
        """Tag every changed package that declares a version, then push all tags."""
        context.require_release_branch('push tags')
        self._operator.info('Creating tags for the released packages')
        tags = collect_package_tags(
            repo_root=self._root,
            directories=context.changed_directories,
            manifest_files=self._settings.manifest_files,
            prefix=self._settings.tag_prefix,
            message_template=self._settings.tag_message,
        )
        for tag in tags:
            create_tag(self._repo, tag=tag.name, message=tag.message)
            context.tags.append(tag.name)
            self._operator.success(f'Tag: {tag.name} successfully created')

        self._operator.info('Pushing the created tags')
        push_tags(self._repo, remote_name=self._settings.git_remote)

    def _show_directories(self, context: ReleaseContext) -> None:
        for directory in context.changed_directories:
            self._operator.item(directory)
