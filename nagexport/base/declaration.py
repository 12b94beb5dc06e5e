#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Publishing of resolved checks

A declaration is keyed by host and service. There is no merging: the last
declaration published for a key replaces the previous one. The aggregator
collects all declarations in bulk, nodes never wait for it.
"""

import hashlib
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import NamedTuple, Protocol

from pydantic import BaseModel

from nagexport.utils import paths, store
from nagexport.utils.hostaddress import HostAddress, HostName
from nagexport.utils.servicename import CommandID, sanitize_service_name, ServiceName

from nagexport.base.intent import ExecutionMode

logger = logging.getLogger("nagexport.declaration")


class ResolvedCheck(BaseModel, frozen=True):
    command_id: CommandID
    command_line: str
    arguments: tuple[str, ...] = ()
    mode: ExecutionMode
    script_source: str | None = None
    delegate_class: str | None = None
    icon_image: str
    notes_url: str | None = None
    hostgroup: str
    parents: tuple[str, ...] | None = None


class DeclarationKey(NamedTuple):
    host_name: HostName
    service: ServiceName


class CheckDeclaration(BaseModel, frozen=True):
    host_name: HostName
    service: ServiceName
    address: HostAddress
    check_interval: int
    check: ResolvedCheck

    @property
    def key(self) -> DeclarationKey:
        return DeclarationKey(self.host_name, self.service)


class DeclarationStore(Protocol):
    def publish(self, key: DeclarationKey, record: CheckDeclaration) -> None: ...

    def collect_all(self) -> Sequence[CheckDeclaration]: ...


class InMemoryDeclarationStore:
    def __init__(self) -> None:
        self._records: dict[DeclarationKey, CheckDeclaration] = {}

    def __len__(self) -> int:
        return len(self._records)

    def publish(self, key: DeclarationKey, record: CheckDeclaration) -> None:
        logger.debug("Publishing %s/%s", key.host_name, key.service)
        self._records[key] = record

    def collect_all(self) -> Sequence[CheckDeclaration]:
        return [self._records[k] for k in sorted(self._records)]


class FileDeclarationStore:
    """One JSON document per declaration below <spool>/<host>/

    Records are replaced atomically, so an aggregator reading the spool
    concurrently sees either the old or the new declaration.
    """

    SUFFIX = ".json"
    PREFIX_BYTES = 64

    def __init__(self, spool_dir: Path | None = None) -> None:
        self._spool_dir = paths.declaration_spool_dir if spool_dir is None else spool_dir

    def __len__(self) -> int:
        return len(self._paths())

    def path_of(self, key: DeclarationKey) -> Path:
        # The sanitized name is not unique ("a/b" vs "a:b") and service names
        # are not limited in length, so it is only a readable prefix. Leading
        # dots are dropped, dot files are the temporary files of the writers.
        prefix = sanitize_service_name(key.service).lstrip(".").encode()[: self.PREFIX_BYTES]
        digest = hashlib.sha256(key.service.encode()).hexdigest()
        return (
            self._spool_dir
            / str(key.host_name)
            / f"{prefix.decode(errors='ignore')}-{digest}{self.SUFFIX}"
        )

    def publish(self, key: DeclarationKey, record: CheckDeclaration) -> None:
        path = self.path_of(key)
        logger.debug("Publishing %s/%s to %s", key.host_name, key.service, path)
        store.makedirs(path.parent)
        store.save_text_to_file(path, record.model_dump_json() + "\n")

    def collect_all(self) -> Sequence[CheckDeclaration]:
        declarations = []
        for path in self._paths():
            if not (content := store.load_text_from_file(path)):
                # created by the lock of a concurrent writer, not yet written
                continue
            declarations.append(CheckDeclaration.model_validate_json(content))
        return sorted(declarations, key=lambda d: d.key)

    def _paths(self) -> list[Path]:
        if not self._spool_dir.exists():
            return []
        return sorted(
            p
            for p in self._spool_dir.glob(f"*/*{self.SUFFIX}")
            if not p.name.startswith(".")
        )
