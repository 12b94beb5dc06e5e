#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Aggregation of the published declarations into Nagios object configuration"""

import hashlib
import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import Any, IO

from pydantic import BaseModel

from nagexport.exceptions import NXGeneralException
from nagexport.utils import paths, store
from nagexport.utils.hostaddress import HostName
from nagexport.utils.log import VERBOSE
from nagexport.utils.servicename import CommandID, sanitize_service_name

from nagexport.base.declaration import CheckDeclaration, DeclarationKey, DeclarationStore
from nagexport.base.intent import ExecutionMode

logger = logging.getLogger("nagexport.core_nagios")

ObjectSpec = dict[str, Any]


class AggregatorConfig(BaseModel, frozen=True):
    host_template: str = "generic-host"
    service_template: str = "generic-service"
    define_hostgroups: bool = True


@dataclass(frozen=True)
class ServerRequirements:
    """What the monitoring server has to provide for the declared checks"""

    delegate_classes: Sequence[str]
    script_sources: Sequence[str]


class NagiosConfig:
    def __init__(self, outfile: IO[str]) -> None:
        self._outfile = outfile
        self.hostgroups_to_define: set[str] = set()
        self.commands_to_define: dict[str, str] = {}

    def write(self, x: str) -> None:
        self._outfile.write(x)


def default_escape(arg: str) -> str:
    r"""Arguments are separated by ! in the check_command of a service

    >>> default_escape("a!b")
    'a\\!b'
    """
    return arg.replace("!", "\\!")


def hostgroups_of(hostgroups: str) -> list[str]:
    """The hostgroups of a comma separated hostgroups attribute

    >>> hostgroups_of("web, dmz")
    ['web', 'dmz']
    """
    return [g.strip() for g in hostgroups.split(",") if g.strip()]


def server_requirements(declarations: Iterable[CheckDeclaration]) -> ServerRequirements:
    delegates = set()
    scripts = set()
    for declaration in declarations:
        if declaration.check.delegate_class:
            delegates.add(declaration.check.delegate_class)
        # Agent executed scripts are installed on the node itself
        if declaration.check.script_source and declaration.check.mode is ExecutionMode.DIRECT:
            scripts.add(declaration.check.script_source)
    return ServerRequirements(delegate_classes=sorted(delegates), script_sources=sorted(scripts))


def create_config(
    outfile: IO[str],
    declarations: Sequence[CheckDeclaration],
    config: AggregatorConfig = AggregatorConfig(),
    escape_func: Callable[[str], str] = default_escape,
) -> None:
    cfg = NagiosConfig(outfile)
    command_names = _command_names(declarations)

    _output_conf_header(cfg)

    by_host: dict[HostName, list[CheckDeclaration]] = defaultdict(list)
    for declaration in declarations:
        by_host[declaration.host_name].append(declaration)

    for host_name in sorted(by_host):
        _create_nagios_config_host(cfg, config, host_name, by_host[host_name])
        for declaration in by_host[host_name]:
            _create_nagios_servicedef(
                cfg, config, declaration, command_names[declaration.key], escape_func
            )

    if config.define_hostgroups:
        _create_nagios_config_hostgroups(cfg)
    _create_nagios_config_commands(cfg)


def _output_conf_header(cfg: NagiosConfig) -> None:
    cfg.write(
        """#
# Created by nagexport. Do not edit.
#

"""
    )


def _command_names(declarations: Sequence[CheckDeclaration]) -> Mapping[DeclarationKey, str]:
    """Map every declaration to the name of its command object

    Declarations sharing a command id share the command object as long as
    their command lines are identical. Otherwise the command is defined once
    per host, or once per service if the lines differ on the same host
    ("a/b" and "a:b" have the same command id).
    """
    lines: dict[CommandID, set[str]] = defaultdict(set)
    host_lines: dict[tuple[CommandID, HostName], set[str]] = defaultdict(set)
    for declaration in declarations:
        lines[declaration.check.command_id].add(declaration.check.command_line)
        host_lines[(declaration.check.command_id, declaration.host_name)].add(
            declaration.check.command_line
        )

    names = {}
    for declaration in declarations:
        command_id = declaration.check.command_id
        if len(lines[command_id]) == 1:
            names[declaration.key] = command_id
            continue

        name = f"{command_id}__{sanitize_service_name(declaration.host_name)}"
        if len(host_lines[(command_id, declaration.host_name)]) > 1:
            name += "__" + hashlib.sha256(declaration.service.encode()).hexdigest()[:16]
        names[declaration.key] = name
        logger.log(
            VERBOSE, "Command %s differs between declarations, defining %s", command_id, name
        )
    return names


def _create_nagios_config_host(
    cfg: NagiosConfig,
    config: AggregatorConfig,
    host_name: HostName,
    declarations: Sequence[CheckDeclaration],
) -> None:
    cfg.write("\n# ----------------------------------------------------\n")
    cfg.write("# %s\n" % host_name)
    cfg.write("# ----------------------------------------------------\n")

    first = declarations[0]
    for other in declarations[1:]:
        if (other.address, other.check.hostgroup, other.check.parents, other.check.icon_image) != (
            first.address,
            first.check.hostgroup,
            first.check.parents,
            first.check.icon_image,
        ):
            logger.warning(
                "Host %s: service %s declares other host attributes than %s, keeping the latter",
                host_name,
                other.service,
                first.service,
            )

    host_spec: ObjectSpec = {
        "use": config.host_template,
        "host_name": host_name,
        "alias": host_name,
        "address": first.address,
        "hostgroups": first.check.hostgroup,
        "icon_image": first.check.icon_image,
    }
    if first.check.parents:
        host_spec["parents"] = ",".join(first.check.parents)
    cfg.hostgroups_to_define.update(hostgroups_of(first.check.hostgroup))

    cfg.write(_format_nagios_object("host", host_spec))


def _create_nagios_servicedef(
    cfg: NagiosConfig,
    config: AggregatorConfig,
    declaration: CheckDeclaration,
    command_name: str,
    escape_func: Callable[[str], str],
) -> None:
    check = declaration.check
    cfg.commands_to_define[command_name] = check.command_line

    service_spec: ObjectSpec = {
        "use": config.service_template,
        "host_name": declaration.host_name,
        "service_description": declaration.service,
        "check_command": "".join([command_name, *("!" + escape_func(a) for a in check.arguments)]),
        "check_interval": declaration.check_interval,
    }
    if check.notes_url:
        service_spec["notes_url"] = check.notes_url

    cfg.write(_format_nagios_object("service", service_spec))


def _create_nagios_config_hostgroups(cfg: NagiosConfig) -> None:
    for hostgroup in sorted(cfg.hostgroups_to_define):
        cfg.write(
            _format_nagios_object(
                "hostgroup",
                {
                    "hostgroup_name": hostgroup,
                    "alias": hostgroup,
                },
            )
        )


def _create_nagios_config_commands(cfg: NagiosConfig) -> None:
    cfg.write("\n# ------------------------------------------------------------\n")
    cfg.write("# Check commands\n")
    cfg.write("# ------------------------------------------------------------\n\n")
    for command_name, command_line in sorted(cfg.commands_to_define.items()):
        cfg.write(
            _format_nagios_object(
                "command",
                {
                    "command_name": command_name,
                    "command_line": command_line,
                },
            )
        )


def _format_nagios_object(object_type: str, object_spec: ObjectSpec) -> str:
    cfg = ["define %s {" % object_type]
    for key, val in sorted(object_spec.items(), key=lambda x: x[0]):
        # Object definitions are line based
        if any(c in str(val) for c in "\r\n"):
            raise NXGeneralException(
                f"Cannot define {object_type} {key} {str(val)!r}: values must be a single line"
            )
        cfg.append("  %-29s %s" % (key, val))
    cfg.append("}")

    return "\n".join(cfg) + "\n\n"


class NagiosCore:
    def __init__(self, config: AggregatorConfig = AggregatorConfig()) -> None:
        self._config = config

    def create_config(
        self,
        declaration_store: DeclarationStore,
        objects_file: Path = paths.nagios_objects_file,
    ) -> ServerRequirements:
        """Collect all declarations and replace the Nagios object file

        Rendering errors leave the old file in place, it is only replaced
        once the new configuration has been created completely.
        """
        declarations = declaration_store.collect_all()
        logger.info("Creating Nagios configuration for %d declarations", len(declarations))

        config_buffer = StringIO()
        create_config(config_buffer, declarations, self._config)
        store.save_text_to_file(objects_file, config_buffer.getvalue(), mode=0o644)

        return server_requirements(declarations)
