#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Callable
from typing import Any

import pytest

from tests.testlib.collaborators import RecordingAgent

from nagexport.utils.hostaddress import HostAddress, HostName

from nagexport.base.config import LayeredConfigSource, NodeFacts
from nagexport.base.declaration import InMemoryDeclarationStore
from nagexport.base.intent import CheckIntent


@pytest.fixture(name="facts")
def fixture_facts() -> NodeFacts:
    return NodeFacts(
        hostname=HostName("web01.example.com"),
        address=HostAddress("10.1.2.3"),
        operatingsystem="RedHat",
        zone="dmz",
    )


@pytest.fixture(name="empty_source")
def fixture_empty_source() -> LayeredConfigSource:
    return LayeredConfigSource([])


@pytest.fixture(name="recording_agent")
def fixture_recording_agent() -> RecordingAgent:
    return RecordingAgent()


@pytest.fixture(name="declaration_store")
def fixture_declaration_store() -> InMemoryDeclarationStore:
    return InMemoryDeclarationStore()


@pytest.fixture(name="make_intent")
def fixture_make_intent(facts: NodeFacts) -> Callable[..., CheckIntent]:
    """See Also:
    * https://docs.pytest.org/en/7.2.x/how-to/fixtures.html#factories-as-fixtures
    """

    def _make_intent(service: str, **kwargs: Any) -> CheckIntent:
        kwargs.setdefault("host_name", facts.hostname)
        kwargs.setdefault("address", facts.address)
        return CheckIntent(service=service, **kwargs)

    return _make_intent
