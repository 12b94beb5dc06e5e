#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import re
from collections.abc import Mapping
from typing import Final

MacroMapping = Mapping[str, str]

# Nagios resource macro pointing to the plugin directory of the core
PLUGIN_DIR_MACRO: Final = "$USER1$"
MACRO_SIGIL: Final = "$"

_ARGUMENT_MACRO = re.compile(r"\$ARG([1-9][0-9]*)\$")
# Nagios counts arguments from 1 on, $ARG0$ or $ARG01$ are never replaced
_INVALID_ARGUMENT_MACRO = re.compile(r"\$ARG0[0-9]*\$")


def replace_macros_in_str(string: str, macro_mapping: MacroMapping) -> str:
    """
    >>> replace_macros_in_str("abc $MACRO$ 123", {"$MACRO$": "replacement", })
    'abc replacement 123'
    >>> replace_macros_in_str("abc $MACRO$ 123", {"$MACRO2$": "replacement2"})
    'abc $MACRO$ 123'
    """
    for macro, replacement in macro_mapping.items():
        string = string.replace(macro, replacement)
    return string


def argument_macro_indices(command_line: str) -> set[int]:
    """The indices of all $ARGn$ macros used in a command line

    >>> sorted(argument_macro_indices("check_http -H $ARG1$ -u $ARG2$ -p $ARG1$"))
    [1, 2]
    >>> argument_macro_indices("check_ping")
    set()
    """
    return {int(m) for m in _ARGUMENT_MACRO.findall(command_line)}


def highest_argument_macro(command_line: str) -> int:
    """
    >>> highest_argument_macro("check_tcp -p $ARG3$")
    3
    >>> highest_argument_macro("check_tcp -p 22")
    0
    """
    return max(argument_macro_indices(command_line), default=0)


def invalid_argument_macros(command_line: str) -> list[str]:
    """
    >>> invalid_argument_macros("check_tcp -H $ARG0$ -p $ARG01$ -w $ARG1$")
    ['$ARG0$', '$ARG01$']
    """
    return _INVALID_ARGUMENT_MACRO.findall(command_line)
