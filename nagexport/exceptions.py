#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions"""

__all__ = [
    "NXConfigurationError",
    "NXException",
    "NXGeneralException",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class NXException(Exception):
    pass


class NXGeneralException(NXException):
    pass


class NXConfigurationError(NXGeneralException):
    """Raised when a check intent combines options that can not be resolved.

    These are configuration time errors: resolution of the check is aborted
    and nothing is published."""
