from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from git import Repo

# Allow `import monorel` when running tests from the repo root without installing the package.
PYTHON_ROOT = Path(__file__).resolve().parents[1] / 'src'
sys.path.insert(0, str(PYTHON_ROOT))

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class ScriptedOperator:
    """Operator that answers checkpoints from a script and records everything shown."""

    answers: list[bool] = field(default_factory=list)
    default: bool = True
    questions: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return self.default

    def info(self, message: str) -> None:
        self.messages.append(message)

    def item(self, message: str) -> None:
        self.messages.append(f'  {message}')

    def notice(self, message: str) -> None:
        self.messages.append(message)

    def success(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def make_operator() -> Callable[..., ScriptedOperator]:
    return ScriptedOperator


def configure_identity(repo: Repo) -> None:
    with repo.config_writer() as config:
        config.set_value('user', 'name', 'Release Bot')
        config.set_value('user', 'email', 'release-bot@example.com')
        config.set_value('commit', 'gpgsign', 'false')
        config.set_value('tag', 'gpgsign', 'false')


def init_repo(path: Path, *, bare: bool = False) -> Repo:
    repo = Repo.init(path, bare=bare)
    repo.git.symbolic_ref('HEAD', 'refs/heads/master')
    if not bare:
        configure_identity(repo)
    return repo


def commit_files(repo: Repo, files: dict[str, str], message: str) -> str:
    root = Path(repo.working_tree_dir)
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding='utf-8')
    repo.git.add(*files)
    repo.git.commit('-m', message)
    return repo.head.commit.hexsha


@pytest.fixture
def git_repo(tmp_path: Path) -> Repo:
    """A local repository on `master` with a single root commit."""
    repo = init_repo(tmp_path / 'repo')
    commit_files(repo, {'README.md': '# monorepo\n'}, 'chore: initial commit')
    return repo


@pytest.fixture
def commit() -> Callable[[Repo, dict[str, str], str], str]:
    return commit_files


@dataclass(frozen=True)
class RemoteMonorepo:
    """A bare `origin` with `master` and `develop`, plus a fresh clone to release from."""

    origin: Repo
    work: Repo
    seed: Repo


@pytest.fixture
def remote_monorepo(tmp_path: Path) -> RemoteMonorepo:
    origin = init_repo(tmp_path / 'origin.git', bare=True)

    seed = init_repo(tmp_path / 'seed')
    commit_files(
        seed,
        {
            'README.md': '# monorepo\n',
            'pkg-a/package.json': '{"name": "pkg-a", "version": "1.0.0"}\n',
            'pkg-b/package.json': '{"name": "pkg-b", "version": "0.3.0"}\n',
        },
        'chore: initial commit',
    )
    seed.create_remote('origin', str(origin.git_dir))
    seed.git.push('origin', 'master')

    seed.git.checkout('-b', 'develop')
    commit_files(
        seed,
        {
            'pkg-a/package.json': '{"name": "pkg-a", "version": "2.0.0"}\n',
            'pkg-a/index.js': 'module.exports = 2;\n',
        },
        'feat(pkg-a): new major',
    )
    seed.git.push('origin', 'develop')

    work = Repo.clone_from(str(origin.git_dir), tmp_path / 'work')
    configure_identity(work)
    return RemoteMonorepo(origin=origin, work=work, seed=seed)
