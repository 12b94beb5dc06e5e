#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from nagexport.exceptions import NXGeneralException
from nagexport.utils.servicename import CommandID

from nagexport.agent.nrpe import HEADER

logger = logging.getLogger("nagexport.agent.sudoers")

# Characters with a meaning in sudoers, they have to be escaped in commands
_SUDOERS_SPECIAL_CHARS = "\\,:="


def escape_command(command: str) -> str:
    r"""Escape a command line for a sudoers command specification

    >>> escape_command("/bin/check_http -H localhost:8080 -e 200,301")
    '/bin/check_http -H localhost\\:8080 -e 200\\,301'
    >>> escape_command(r"/bin/check_x -s a\b=c")
    '/bin/check_x -s a\\\\b\\=c'
    """
    for char in _SUDOERS_SPECIAL_CHARS:
        command = command.replace(char, "\\" + char)
    return command


@dataclass(frozen=True)
class ElevationGrant:
    command_id: CommandID
    acting_user: str
    target_user: str
    command: str
    interactive: bool = False

    def sudoers_line(self) -> str:
        """
        >>> ElevationGrant("check_raid", "nrpe", "root", "/bin/check_raid").sudoers_line()
        'nrpe ALL=(root) NOPASSWD: /bin/check_raid'
        """
        tag = "" if self.interactive else "NOPASSWD: "
        return f"{self.acting_user} ALL=({self.target_user}) {tag}{escape_command(self.command)}"


class SudoersPolicy:
    """Sudo rules allowing the daemon account to run single checks as another user"""

    def __init__(self) -> None:
        self._grants: dict[CommandID, ElevationGrant] = {}

    def grant_elevation(
        self,
        command_id: CommandID,
        acting_user: str,
        target_user: str,
        command: str,
        interactive: bool = False,
    ) -> None:
        if "\n" in command:
            raise NXGeneralException(f"Elevated command {command_id} must be a single line")

        grant = ElevationGrant(command_id, acting_user, target_user, command, interactive)
        if (existing := self._grants.get(command_id)) is not None and existing != grant:
            raise NXGeneralException(
                f"Elevation of {command_id} is already granted as {existing!r}, "
                f"can not grant {grant!r}"
            )
        logger.debug("Granting %r", grant)
        self._grants[command_id] = grant

    def grants(self) -> Sequence[ElevationGrant]:
        return list(self._grants.values())

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self._lines())

    def _lines(self) -> Iterator[str]:
        yield from HEADER
        # NRPE has no terminal
        for user in sorted({g.acting_user for g in self._grants.values()}):
            yield f"Defaults:{user} !requiretty"
        for grant in self._grants.values():
            yield f"# {grant.command_id}"
            yield grant.sudoers_line()
