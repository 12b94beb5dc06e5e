#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
from io import StringIO
from pathlib import Path

import pytest

from nagexport.exceptions import NXGeneralException
from nagexport.utils.hostaddress import HostAddress, HostName

from nagexport.base.declaration import (
    CheckDeclaration,
    FileDeclarationStore,
    InMemoryDeclarationStore,
    ResolvedCheck,
)
from nagexport.base.intent import ExecutionMode

from nagexport.core_nagios import (
    _format_nagios_object,
    AggregatorConfig,
    create_config,
    NagiosCore,
    server_requirements,
    ServerRequirements,
)


def _declaration(
    host: str,
    service: str,
    command_id: str,
    command_line: str,
    *,
    arguments: tuple[str, ...] = (),
    mode: ExecutionMode = ExecutionMode.DIRECT,
    address: str = "10.0.0.1",
    hostgroup: str = "dmz",
    parents: tuple[str, ...] | None = None,
    notes_url: str | None = None,
    delegate_class: str | None = None,
    script_source: str | None = None,
) -> CheckDeclaration:
    return CheckDeclaration(
        host_name=HostName(host),
        service=service,
        address=HostAddress(address),
        check_interval=5,
        check=ResolvedCheck(
            command_id=command_id,
            command_line=command_line,
            arguments=arguments,
            mode=mode,
            script_source=script_source,
            delegate_class=delegate_class,
            icon_image="redhat.png",
            notes_url=notes_url,
            hostgroup=hostgroup,
            parents=parents,
        ),
    )


def _render(
    declarations: list[CheckDeclaration], config: AggregatorConfig = AggregatorConfig()
) -> str:
    outfile = StringIO()
    create_config(outfile, declarations, config)
    return outfile.getvalue()


def test_format_nagios_object() -> None:
    assert _format_nagios_object("command", {"command_line": "x", "command_name": "check_x"}) == (
        "define command {\n"
        "  command_line                  x\n"
        "  command_name                  check_x\n"
        "}\n\n"
    )


def test_create_config_objects() -> None:
    config = _render(
        [
            _declaration(
                "web01",
                "http",
                "check_http",
                "$USER1$/check_http -H $ARG1$ -u $ARG2$",
                arguments=("www.example.com", "/a!b"),
                parents=("gw01", "gw02"),
                notes_url="https://wiki/http",
            ),
            _declaration(
                "web01",
                "raid",
                "check_raid",
                "$USER1$/check_nrpe -H 10.0.0.1 -t 10 -c check_raid",
                mode=ExecutionMode.AGENT,
            ),
        ]
    )

    assert config.startswith("#\n# Created by nagexport. Do not edit.\n#\n")
    assert (
        "define host {\n"
        "  address                       10.0.0.1\n"
        "  alias                         web01\n"
        "  host_name                     web01\n"
        "  hostgroups                    dmz\n"
        "  icon_image                    redhat.png\n"
        "  parents                       gw01,gw02\n"
        "  use                           generic-host\n"
        "}\n"
    ) in config
    assert (
        "define service {\n"
        "  check_command                 check_http!www.example.com!/a\\!b\n"
        "  check_interval                5\n"
        "  host_name                     web01\n"
        "  notes_url                     https://wiki/http\n"
        "  service_description           http\n"
        "  use                           generic-service\n"
        "}\n"
    ) in config
    assert "  check_command                 check_raid\n" in config
    assert (
        "define hostgroup {\n"
        "  alias                         dmz\n"
        "  hostgroup_name                dmz\n"
        "}\n"
    ) in config
    assert (
        "define command {\n"
        "  command_line                  $USER1$/check_nrpe -H 10.0.0.1 -t 10 -c check_raid\n"
        "  command_name                  check_raid\n"
        "}\n"
    ) in config
    assert config.count("define host {") == 1
    assert config.count("define service {") == 2
    assert config.count("define command {") == 2


def test_shared_command_is_defined_once() -> None:
    config = _render(
        [
            _declaration("web01", "disk/root", "check_disk_root", "$USER1$/check_disk -w 10%"),
            _declaration("web02", "disk/root", "check_disk_root", "$USER1$/check_disk -w 10%"),
        ]
    )
    assert config.count("define command {") == 1
    assert config.count("  check_command                 check_disk_root\n") == 2


def test_differing_commands_are_defined_per_host() -> None:
    config = _render(
        [
            _declaration(
                "web01",
                "raid",
                "check_raid",
                "$USER1$/check_nrpe -H 10.0.0.1 -t 10 -c check_raid",
                mode=ExecutionMode.AGENT,
            ),
            _declaration(
                "web02",
                "raid",
                "check_raid",
                "$USER1$/check_nrpe -H 10.0.0.2 -t 10 -c check_raid",
                mode=ExecutionMode.AGENT,
                address="10.0.0.2",
            ),
        ]
    )
    assert "  command_name                  check_raid__web01\n" in config
    assert "  command_name                  check_raid__web02\n" in config
    assert "  check_command                 check_raid__web02\n" in config


def test_hostgroups_not_defined() -> None:
    config = _render(
        [_declaration("web01", "x", "check_x", "$USER1$/check_x")],
        AggregatorConfig(define_hostgroups=False),
    )
    assert "define hostgroup" not in config


def test_conflicting_host_attributes_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="nagexport")
    config = _render(
        [
            _declaration("web01", "a", "check_a", "$USER1$/check_a", hostgroup="dmz"),
            _declaration("web01", "b", "check_b", "$USER1$/check_b", hostgroup="web"),
        ]
    )
    assert "  hostgroups                    dmz\n" in config
    assert "service b declares other host attributes than a" in caplog.text


def test_server_requirements() -> None:
    assert server_requirements(
        [
            _declaration(
                "web01",
                "http",
                "check_http",
                "$USER1$/check_http",
                delegate_class="nagios::server::http",
                script_source="puppet:///modules/nagios/check_http",
            ),
            _declaration(
                "web01",
                "raid",
                "check_raid",
                "$USER1$/check_nrpe -H 10.0.0.1 -t 10 -c check_raid",
                mode=ExecutionMode.AGENT,
                delegate_class="nagios::server::nrpe",
                script_source="puppet:///modules/nagios/check_raid",
            ),
            _declaration("web02", "ping", "check_ping", "$USER1$/check_ping"),
        ]
    ) == ServerRequirements(
        delegate_classes=["nagios::server::http", "nagios::server::nrpe"],
        script_sources=["puppet:///modules/nagios/check_http"],
    )


def test_nagios_core_create_config(tmp_path: Path) -> None:
    declaration_store = FileDeclarationStore(tmp_path / "spool")
    declaration = _declaration(
        "web01", "raid", "check_raid", "$USER1$/check_nrpe -H 10.0.0.1 -t 10 -c check_raid",
        mode=ExecutionMode.AGENT,
        delegate_class="nagios::server::nrpe",
    )
    declaration_store.publish(declaration.key, declaration)
    objects_file = tmp_path / "objects.cfg"

    requirements = NagiosCore().create_config(declaration_store, objects_file)

    assert requirements.delegate_classes == ["nagios::server::nrpe"]
    assert objects_file.read_text() == _render([declaration])


def test_nagios_core_keeps_old_file_on_error(tmp_path: Path) -> None:
    objects_file = tmp_path / "objects.cfg"
    objects_file.write_text("old")

    class _BrokenStore(InMemoryDeclarationStore):
        def collect_all(self):  # type: ignore[no-untyped-def]
            return [None]

    with pytest.raises(AttributeError):
        NagiosCore().create_config(_BrokenStore(), objects_file)
    assert objects_file.read_text() == "old"


def test_differing_commands_on_same_host_are_defined_per_service() -> None:
    config = _render(
        [
            _declaration("web01", "a/b", "check_a_b", "$USER1$/check_one"),
            _declaration("web01", "a:b", "check_a_b", "$USER1$/check_two"),
        ]
    )
    assert config.count("define command {") == 2
    assert "  command_line                  $USER1$/check_one\n" in config
    assert "  command_line                  $USER1$/check_two\n" in config
    check_commands = [
        line.split()[1] for line in config.splitlines() if line.startswith("  check_command")
    ]
    assert len(set(check_commands)) == 2
    assert all(c.startswith("check_a_b__web01__") for c in check_commands)


def test_hostgroup_list_defines_every_hostgroup() -> None:
    config = _render(
        [_declaration("web01", "x", "check_x", "$USER1$/check_x", hostgroup="web,dmz")]
    )
    assert "  hostgroups                    web,dmz\n" in config
    assert "  hostgroup_name                web\n" in config
    assert "  hostgroup_name                dmz\n" in config
    assert config.count("define hostgroup {") == 2


@pytest.mark.parametrize(
    "service, notes_url",
    [
        pytest.param("disk\n  check_command evil", None, id="service"),
        pytest.param("disk", "https://wiki/\nservice_description evil", id="notes_url"),
    ],
)
def test_line_breaks_are_rejected(service: str, notes_url: str | None) -> None:
    with pytest.raises(NXGeneralException, match="single line"):
        _render([_declaration("web01", service, "check_x", "$USER1$/check_x", notes_url=notes_url)])


def test_nagios_core_keeps_old_file_on_line_breaks(tmp_path: Path) -> None:
    objects_file = tmp_path / "objects.cfg"
    objects_file.write_text("old")
    declaration_store = InMemoryDeclarationStore()
    declaration = _declaration("web01", "disk\nx", "check_disk_x", "$USER1$/check_disk")
    declaration_store.publish(declaration.key, declaration)

    with pytest.raises(NXGeneralException):
        NagiosCore().create_config(declaration_store, objects_file)
    assert objects_file.read_text() == "old"
