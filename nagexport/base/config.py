#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Site defaults, node identity facts and the shared hierarchical configuration"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol, TypeVar

from pydantic import BaseModel

from nagexport.utils import paths
from nagexport.utils.hostaddress import HostAddress, HostName

logger = logging.getLogger("nagexport.config")

_T = TypeVar("_T")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class ConfigSource(Protocol):
    """The shared hierarchical configuration all nodes read their defaults from"""

    def lookup(self, key: str, default: object = None) -> object: ...


class LayeredConfigSource:
    """Hiera like lookup in an ordered list of mappings

    The first layer is the most specific one (e.g. the node), the last one
    the most generic (e.g. common). The first layer having the key wins.
    """

    def __init__(self, layers: Sequence[Mapping[str, object]]) -> None:
        self._layers = tuple(layers)

    def lookup(self, key: str, default: object = None) -> object:
        for layer in self._layers:
            if key in layer:
                return layer[key]
        return default


def lookup_layered(
    override: _T | None,
    source: ConfigSource,
    key: str,
    default: _T | None,
) -> _T | None:
    """Explicit override, then the shared configuration, then the default

    >>> lookup_layered("a", LayeredConfigSource([{"k": "b"}]), "k", "c")
    'a'
    >>> lookup_layered(None, LayeredConfigSource([{"k": "b"}]), "k", "c")
    'b'
    >>> lookup_layered(None, LayeredConfigSource([]), "k", "c")
    'c'
    """
    if override is not None:
        return override
    value = source.lookup(key, MISSING)
    if value is MISSING or value is None:
        return default
    logger.debug("Using %r from shared configuration key %s", value, key)
    return value  # type: ignore[return-value]


@dataclass(frozen=True)
class NodeFacts:
    """Read only identity facts of the node the checks are declared on"""

    hostname: HostName
    address: HostAddress
    operatingsystem: str
    zone: str


class ConfigKeys(BaseModel, frozen=True):
    notes_url: str = "nagios_check_notes_url"
    hostgroup: str = "nagios_hostgroup"
    parents: str = "nagios_parents"


class ResolverConfig(BaseModel, frozen=True):
    plugin_dir: Path = paths.plugin_dir
    sudo_binary: Path = paths.sudo_binary
    # Account the local execution daemon runs its commands as
    nrpe_user: str = "nrpe"
    # Owner of the installed plugins
    nagios_user: str = "nagios"
    nagios_group: str = "nagios"
    plugin_mode: int = 0o754
    # Resource the script installation has to wait for
    nrpe_daemon_resource: str = "nrpe-daemon"
    check_proxy_delegate: str = "nagios::server::nrpe"
    check_proxy_command_line: str = "$USER1$/check_nrpe -H $HOSTADDRESS$ -t $TIMEOUT$ -c $COMMAND$"
    config_keys: ConfigKeys = ConfigKeys()
    os_icons: Mapping[str, str] = {
        "RedHat": "redhat.png",
        "Debian": "debian.png",
        "Ubuntu": "ubuntu.png",
    }
    default_icon: str = "linux40.png"


DEFAULT_CONFIG = ResolverConfig()
