#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Build the command lines of a declared check

Directly polled checks are run by the Nagios core. Their plugin path is
resolved by the core through $USER1$, never on the node. Agent executed
checks are run by NRPE on the node, so their path is resolved here and the
core only gets the check_nrpe call.
"""

from pathlib import PurePosixPath

from nagexport.utils.macros import MACRO_SIGIL, PLUGIN_DIR_MACRO, replace_macros_in_str
from nagexport.utils.servicename import CommandID

from nagexport.base.config import ResolverConfig


def is_qualified(command: str) -> bool:
    """Absolute paths and commands starting with a macro are used as they are

    >>> is_qualified("/opt/plugins/check_foo")
    True
    >>> is_qualified("$USER2$/check_foo")
    True
    >>> is_qualified("check_foo -w 1")
    False
    """
    return command.startswith(("/", MACRO_SIGIL))


def compile_direct_command_line(command: str) -> str:
    """
    >>> compile_direct_command_line("check_disk -w 10% -c 5%")
    '$USER1$/check_disk -w 10% -c 5%'
    >>> compile_direct_command_line("/usr/local/bin/check_disk -w $ARG1$")
    '/usr/local/bin/check_disk -w $ARG1$'
    """
    if is_qualified(command):
        return command
    return f"{PLUGIN_DIR_MACRO}/{command}"


def absolute_plugin_path(command: str, plugin_dir: PurePosixPath) -> str:
    """
    >>> absolute_plugin_path("check_raid -v", PurePosixPath("/usr/lib64/nagios/plugins"))
    '/usr/lib64/nagios/plugins/check_raid -v'
    >>> absolute_plugin_path("/bin/check_raid", PurePosixPath("/usr/lib64/nagios/plugins"))
    '/bin/check_raid'
    """
    if command.startswith("/"):
        return command
    return f"{plugin_dir}/{command}"


def elevated(command: str, user: str, config: ResolverConfig) -> str:
    """Run the command as another user through sudo

    >>> elevated("/usr/lib64/nagios/plugins/check_raid", "root", ResolverConfig())
    '/usr/bin/sudo -u root /usr/lib64/nagios/plugins/check_raid'
    """
    return f"{config.sudo_binary} -u {user} {command}"


def compile_check_proxy_command_line(
    address: str, timeout: int, command_id: CommandID, config: ResolverConfig
) -> str:
    """The call of the NRPE proxy the core runs for agent executed checks

    >>> compile_check_proxy_command_line("10.1.2.3", 10, "check_raid", ResolverConfig())
    '$USER1$/check_nrpe -H 10.1.2.3 -t 10 -c check_raid'
    """
    return replace_macros_in_str(
        config.check_proxy_command_line,
        {
            "$HOSTADDRESS$": address,
            "$TIMEOUT$": str(timeout),
            "$COMMAND$": command_id,
        },
    )
