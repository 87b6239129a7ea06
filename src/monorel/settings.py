from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


class PyprojectToolSettingsSource(PydanticBaseSettingsSource):
    """Read `[tool.monorel]` from `pyproject.toml`, accepting kebab-case keys."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        path: Path | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._path = path or Path('pyproject.toml')

    def get_field_value(
        self,
        field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        # Values are provided in bulk by __call__.
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        with self._path.open('rb') as fh:
            document = tomllib.load(fh)
        table = document.get('tool', {}).get('monorel', {})
        return {key.replace('-', '_'): value for key, value in table.items()}


class MonorelSettings(BaseSettings):
    """Configuration for the release workflow.

    Sources, highest priority first: constructor kwargs, `MONOREL_*` environment
    variables, `monorel.toml`, then `[tool.monorel]` in `pyproject.toml`.

    Attributes:
        base_branch: Default target ref the release is diffed against and merged into.
        integration_branch: Branch the release branch is cut from and merged back into.
        git_remote: Remote used for pulls and pushes.
        release_branch_prefix: Prefix of the dated release branch name.
        tag_prefix: Prefix placed before the version in package tags.
        tag_message: Annotation message for package tags; `{tag}`, `{directory}`
            and `{version}` are substituted.
        manifest_files: Manifest file names looked up in each changed directory, in order.
    """

    model_config = SettingsConfigDict(
        env_prefix='MONOREL_',
        env_nested_delimiter='__',
        toml_file='monorel.toml',
        extra='ignore',
    )

    base_branch: str = 'master'
    integration_branch: str = 'develop'
    git_remote: str = 'origin'
    release_branch_prefix: str = 'release/'
    tag_prefix: str = 'v'
    tag_message: str = 'Release {tag}'
    manifest_files: list[str] = Field(default_factory=lambda: ['package.json'])

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
            PyprojectToolSettingsSource(settings_cls),
        )

    @field_validator('tag_message')
    @classmethod
    def check_tag_message(cls, value: str) -> str:
        # Tags are formatted only after master has been pushed.
        try:
            value.format(tag='pkg/v1.0.0', directory='pkg', version='1.0.0')
        except (KeyError, IndexError, ValueError, AttributeError) as exc:
            msg = (
                f'Invalid tag message template {value!r}: only {{tag}}, {{directory}} '
                f'and {{version}} may be substituted ({exc!r})'
            )
            raise ValueError(msg) from exc
        return value
