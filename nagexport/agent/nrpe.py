#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
from collections.abc import Iterator, Sequence
from typing import Final, TypedDict

from nagexport.exceptions import NXGeneralException
from nagexport.utils.servicename import CommandID

__all__ = ["NRPECommand", "NRPEConfig"]

logger = logging.getLogger("nagexport.agent.nrpe")

HEADER: Final = [
    "# Created by nagexport.",
    "# This file is managed automatically, do not edit manually or you",
    "# lose your changes next time the checks of this node are declared.",
]


class NRPECommand(TypedDict):
    command_id: CommandID
    cmdline: str


class NRPEConfig:
    """The commands the local NRPE daemon offers to check_nrpe"""

    def __init__(self) -> None:
        self._commands: dict[CommandID, str] = {}

    def register_check(self, command_id: CommandID, command_line: str) -> None:
        if "\n" in command_line:
            raise NXGeneralException(f"NRPE command {command_id} must be a single line")

        if (existing := self._commands.get(command_id)) is not None and existing != command_line:
            raise NXGeneralException(
                f"NRPE command {command_id} is already registered as {existing!r}, "
                f"can not register {command_line!r}"
            )
        logger.debug("Registering NRPE command %s: %s", command_id, command_line)
        self._commands[command_id] = command_line

    def commands(self) -> Sequence[NRPECommand]:
        return [{"command_id": c, "cmdline": cmdline} for c, cmdline in self._commands.items()]

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self._lines())

    def _lines(self) -> Iterator[str]:
        yield from HEADER
        yield ""
        for command in self.commands():
            yield f"command[{command['command_id']}]={command['cmdline']}"
