#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Interfaces to the node local side effects of an agent executed check

The implementations are found in nagexport.agent."""

from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import Protocol

from nagexport.utils.servicename import CommandID


class DaemonRegistrar(Protocol):
    def register_check(self, command_id: CommandID, command_line: str) -> None: ...


class ScriptDeployer(Protocol):
    def install_file(
        self,
        path: PurePosixPath,
        owner: str,
        group: str,
        mode: int,
        source: str,
        requires: Sequence[str] = (),
    ) -> None: ...


class PrivilegePolicy(Protocol):
    def grant_elevation(
        self,
        command_id: CommandID,
        acting_user: str,
        target_user: str,
        command: str,
        interactive: bool = False,
    ) -> None: ...
