#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
from collections.abc import Sequence
from pathlib import PurePosixPath

from nagexport.exceptions import NXGeneralException

logger = logging.getLogger("nagexport.agent.deployer")


def _validate_type(
    candidate: object,
    expected_type: type,
    name: str,
    *,
    allow_none: bool = False,
) -> None:
    if allow_none and candidate is None:
        return
    if not isinstance(candidate, expected_type):
        raise TypeError(
            f"{name} Argument must be of type {expected_type.__name__}, "
            f"got {type(candidate).__name__}"
        )


class FileArtifact:
    """A script that is installed on the node

    Args:
        path: Absolute target path on the node.
        owner: Owning user of the installed file.
        group: Owning group of the installed file.
        mode: Permission bits of the installed file.
        source: Location the file content is fetched from.
        requires: Setup steps that have to be done before the file is installed.
    """

    def __init__(
        self,
        *,
        path: PurePosixPath,
        owner: str,
        group: str,
        mode: int,
        source: str,
        requires: Sequence[str] = (),
    ) -> None:
        _validate_type(path, PurePosixPath, "path")
        _validate_type(owner, str, "owner")
        _validate_type(group, str, "group")
        _validate_type(mode, int, "mode")
        _validate_type(source, str, "source")
        if not path.is_absolute():
            raise ValueError(f"path must be absolute, got {path}")
        if not 0 <= mode <= 0o7777:
            raise ValueError(f"mode out of range: {mode:o}")

        self.path = path
        self.owner = owner
        self.group = group
        self.mode = mode
        self.source = source
        self.requires = tuple(requires)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"path={self.path!r}, "
            f"owner={self.owner!r}, "
            f"group={self.group!r}, "
            f"mode={self.mode:#o}, "
            f"source={self.source!r}, "
            f"requires={self.requires!r})"
        )

    def __eq__(self, other: object) -> bool:
        return self.__class__ == other.__class__ and self.__dict__ == other.__dict__


class ScriptDeployer:
    """Collects the files to install on the node and the setup steps they depend on"""

    def __init__(self) -> None:
        self._provided: list[str] = []
        self._artifacts: dict[PurePosixPath, FileArtifact] = {}

    def provide(self, resource: str) -> None:
        """Announce a setup step, e.g. the installation of the NRPE daemon"""
        if resource not in self._provided:
            self._provided.append(resource)

    def install_file(
        self,
        path: PurePosixPath,
        owner: str,
        group: str,
        mode: int,
        source: str,
        requires: Sequence[str] = (),
    ) -> None:
        artifact = FileArtifact(
            path=path, owner=owner, group=group, mode=mode, source=source, requires=requires
        )
        if (existing := self._artifacts.get(path)) is not None and existing != artifact:
            raise NXGeneralException(
                f"Conflicting installations of {path}: {existing!r}, {artifact!r}"
            )
        logger.debug("Installing %r", artifact)
        self._artifacts[path] = artifact

    def artifacts(self) -> Sequence[FileArtifact]:
        return list(self._artifacts.values())

    def steps(self) -> Sequence[str | FileArtifact]:
        """All setup steps in the order they have to be executed

        The files are installed after everything they require is set up.
        """
        for artifact in self._artifacts.values():
            if missing := [r for r in artifact.requires if r not in self._provided]:
                raise NXGeneralException(
                    f"Installation of {artifact.path} requires {', '.join(missing)}, "
                    "which is not set up on this node"
                )
        return [*self._provided, *self._artifacts.values()]
