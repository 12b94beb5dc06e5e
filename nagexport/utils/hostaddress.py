#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

import ipaddress
import re
from typing import TypeAlias

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema, CoreSchema

__all__ = ["HostAddress", "HostName"]


class HostAddress(str):
    """A host name or IP address as it is used in the Nagios objects"""

    REGEX_HOST_NAME = re.compile(r"^\w[-0-9a-zA-Z_.]*$", re.ASCII)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, _source_type: object, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            handler(str),
        )

    @staticmethod
    def validate(text: str) -> None:
        """Check if it is a HostAddress/HostName

        >>> HostAddress.validate(".")
        Traceback (most recent call last):
            ...
        ValueError: Invalid hostaddress: '.'

        >>> HostAddress.validate("web01.example.com")
        >>> HostAddress.validate("::1")
        """
        if not text:
            raise ValueError("Empty hostaddress")

        if len(text) > 254:
            raise ValueError(f"HostName too long: {text[:16]+'…'!r}")

        try:
            ipaddress.ip_address(text)
            return
        except ValueError:
            pass

        if not HostAddress.REGEX_HOST_NAME.match(text):
            raise ValueError(f"Invalid hostaddress: {text!r}")

    @staticmethod
    def is_valid(text: str) -> bool:
        try:
            HostAddress.validate(text)
            return True
        except ValueError:
            return False

    def __new__(cls, text: str) -> HostAddress:
        """Construct a new HostAddress object

        Raises:
            - ValueError: whenever the given text is not a valid HostAddress
        """
        cls.validate(text)
        return super().__new__(cls, text)


# We do not make a difference between HostAddress and HostName in our code.
HostName: TypeAlias = HostAddress
