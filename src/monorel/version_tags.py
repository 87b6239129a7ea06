from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from monorel.manifests import find_package_version

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path


@dataclass(frozen=True)
class PackageTag:
    """A release tag for one package directory of the monorepo.

    Attributes:
        directory: Top-level directory holding the package (e.g. `pkg-a`).
        version: Version read from the package manifest (e.g. `2.0.0`).
        name: The tag name (e.g. `pkg-a/v2.0.0`).
        message: Annotation message for the tag.
    """

    directory: str
    version: str
    name: str
    message: str


def compute_package_tag(
    *,
    directory: str,
    version: str,
    prefix: str = 'v',
    message_template: str = 'Release {tag}',
) -> PackageTag:
    """Build the `<directory>/<prefix><version>` tag for a package."""
    name = f'{directory}/{prefix}{version}'
    message = message_template.format(tag=name, directory=directory, version=version)
    return PackageTag(directory=directory, version=version, name=name, message=message)


def collect_package_tags(
    *,
    repo_root: Path,
    directories: Iterable[str],
    manifest_files: Sequence[str],
    prefix: str = 'v',
    message_template: str = 'Release {tag}',
) -> list[PackageTag]:
    """Compute tags for every directory that declares a package version.

    Directories without a readable, versioned manifest are skipped.
    """
    tags: list[PackageTag] = []
    for directory in directories:
        version = find_package_version(repo_root / directory, manifest_files)
        if version is None:
            continue
        tags.append(
            compute_package_tag(
                directory=directory,
                version=version,
                prefix=prefix,
                message_template=message_template,
            ),
        )
    return tags
