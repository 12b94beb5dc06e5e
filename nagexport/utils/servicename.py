#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from typing import Final

__all__ = ["CommandID", "ServiceName", "command_id_of", "sanitize_service_name"]

ServiceName = str
CommandID = str

COMMAND_ID_PREFIX: Final = "check_"

_UNSAFE_CHARS: Final = str.maketrans({"/": "_", ":": "_", "\n": "_"})


def sanitize_service_name(service: ServiceName) -> str:
    """Replace the characters that can not be part of a command name

    Every character is mapped to exactly one character, so the length of the
    name is kept.

    >>> sanitize_service_name("disk/root")
    'disk_root'
    >>> sanitize_service_name("http:8080")
    'http_8080'
    >>> sanitize_service_name("a\\nb")
    'a_b'
    """
    return service.translate(_UNSAFE_CHARS)


def command_id_of(service: ServiceName) -> CommandID:
    """The command identifier a check of the given service is published under

    >>> command_id_of("disk/root")
    'check_disk_root'
    """
    return COMMAND_ID_PREFIX + sanitize_service_name(service)
