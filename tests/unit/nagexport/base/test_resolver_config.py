#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from pathlib import Path

import pytest
from pydantic import ValidationError

from nagexport.base.config import (
    DEFAULT_CONFIG,
    LayeredConfigSource,
    lookup_layered,
    ResolverConfig,
)


def test_layered_source_most_specific_layer_wins() -> None:
    source = LayeredConfigSource(
        [
            {"nagios_hostgroup": "web"},
            {"nagios_hostgroup": "common", "nagios_parents": ["gw01"]},
        ]
    )
    assert source.lookup("nagios_hostgroup") == "web"
    assert source.lookup("nagios_parents") == ["gw01"]
    assert source.lookup("unknown", "dflt") == "dflt"
    assert source.lookup("unknown") is None


def test_layered_source_keeps_explicit_none() -> None:
    source = LayeredConfigSource([{"key": None}, {"key": "generic"}])
    assert source.lookup("key", "dflt") is None


@pytest.mark.parametrize(
    "override, layers, expected",
    [
        ("explicit", [{"key": "shared"}], "explicit"),
        (None, [{"key": "shared"}], "shared"),
        (None, [{"other": "shared"}], "default"),
        (None, [{"key": None}], "default"),
        (None, [], "default"),
    ],
)
def test_lookup_layered(override: str | None, layers: list[dict[str, object]], expected: str) -> None:
    assert lookup_layered(override, LayeredConfigSource(layers), "key", "default") == expected


def test_lookup_layered_without_default() -> None:
    assert lookup_layered(None, LayeredConfigSource([]), "key", None) is None


def test_default_config() -> None:
    assert DEFAULT_CONFIG.plugin_dir == Path("/usr/lib64/nagios/plugins")
    assert DEFAULT_CONFIG.sudo_binary == Path("/usr/bin/sudo")
    assert DEFAULT_CONFIG.nrpe_user == "nrpe"
    assert DEFAULT_CONFIG.plugin_mode == 0o754
    assert DEFAULT_CONFIG.check_proxy_delegate == "nagios::server::nrpe"
    assert DEFAULT_CONFIG.config_keys.hostgroup == "nagios_hostgroup"


def test_config_from_plain_data() -> None:
    config = ResolverConfig.model_validate(
        {
            "plugin_dir": "/usr/lib/nagios/plugins",
            "nrpe_user": "nagios",
            "config_keys": {"hostgroup": "monitoring::hostgroup"},
            "os_icons": {"SLES": "suse.png"},
        }
    )
    assert config.plugin_dir == Path("/usr/lib/nagios/plugins")
    assert config.nrpe_user == "nagios"
    assert config.config_keys.hostgroup == "monitoring::hostgroup"
    assert config.config_keys.parents == "nagios_parents"
    assert config.os_icons == {"SLES": "suse.png"}


def test_config_is_frozen() -> None:
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.nrpe_user = "root"  # type: ignore[misc]
