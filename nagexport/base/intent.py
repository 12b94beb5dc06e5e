#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from nagexport.utils.hostaddress import HostAddress, HostName
from nagexport.utils.servicename import ServiceName

from nagexport.base.config import ResolverConfig


class ExecutionMode(enum.Enum):
    # Polled by the Nagios core itself over the network
    DIRECT = "direct"
    # Executed by NRPE on the node, the core only calls check_nrpe
    AGENT = "agent"


@dataclass(frozen=True)
class CheckIntent:
    """What the admin wants to be monitored for one service of one host"""

    service: ServiceName
    host_name: HostName
    address: HostAddress
    mode: ExecutionMode = ExecutionMode.DIRECT
    command: str | None = None
    arguments: Sequence[str] = field(default_factory=tuple)
    script_source: str | None = None
    plugin_dir: PurePosixPath | None = None
    delegate_class: str | None = None
    run_as: str | None = None
    timeout: int = 10
    check_interval: int = 5
    notes_url_template: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.arguments, str):
            raise TypeError(f"arguments must be a sequence of str, got {self.arguments!r}")
        # Sequences are frozen as well, the intent is hashed and compared
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def command_line(self) -> str:
        """The plugin to run, defaults to the installed script or the service"""
        if self.command:
            return self.command
        if self.script_source:
            return script_file_name(self.script_source)
        return self.service

    def effective_plugin_dir(self, config: ResolverConfig) -> PurePosixPath:
        return self.plugin_dir or PurePosixPath(config.plugin_dir)


def script_file_name(source: str) -> str:
    """The last path segment of a script source location

    >>> script_file_name("puppet:///modules/nagios/plugins/check_raid")
    'check_raid'
    >>> script_file_name("check_raid")
    'check_raid'
    """
    return source.rstrip("/").rsplit("/", 1)[-1]
