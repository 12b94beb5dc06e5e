#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Iterator

import pytest

from nagexport.utils import log, store


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    log.clear_console_logging()


@pytest.fixture(autouse=True)
def _release_locks() -> Iterator[None]:
    yield
    for path in list(store._acquired_locks):
        store.release_lock(path)
