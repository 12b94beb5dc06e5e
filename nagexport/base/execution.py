#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from nagexport.exceptions import NXConfigurationError
from nagexport.utils.log import VERBOSE
from nagexport.utils.macros import highest_argument_macro, invalid_argument_macros
from nagexport.utils.servicename import CommandID

from nagexport.base.collaborators import DaemonRegistrar, PrivilegePolicy, ScriptDeployer
from nagexport.base.command_line import absolute_plugin_path, elevated
from nagexport.base.config import ResolverConfig
from nagexport.base.intent import CheckIntent, ExecutionMode, script_file_name

logger = logging.getLogger("nagexport.execution")


@dataclass(frozen=True)
class DirectCheck:
    """Check run by the Nagios core itself"""

    command: str
    arguments: tuple[str, ...]
    # Installed on the monitoring server, not on the node
    script_source: str | None
    delegate_class: str | None

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.DIRECT


@dataclass(frozen=True)
class AgentDelegatedCheck:
    """Check run by NRPE on the node and fetched by the core through check_nrpe"""

    local_command_line: str
    script_source: str | None
    installed_script: PurePosixPath | None
    run_as: str | None
    delegate_class: str

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.AGENT


ExecutionStrategy = DirectCheck | AgentDelegatedCheck


@dataclass(frozen=True)
class NodeAgent:
    """The node local collaborators used by agent executed checks"""

    registrar: DaemonRegistrar
    deployer: ScriptDeployer
    policy: PrivilegePolicy


def route_check(
    intent: CheckIntent,
    command_id: CommandID,
    agent: NodeAgent,
    config: ResolverConfig,
) -> ExecutionStrategy:
    if intent.mode is ExecutionMode.DIRECT:
        return _direct_check(intent)
    return _agent_delegated_check(intent, command_id, agent, config)


def _direct_check(intent: CheckIntent) -> DirectCheck:
    if intent.run_as is not None:
        raise NXConfigurationError(
            f"Service {intent.service!r}: running a check as another user ({intent.run_as!r}) "
            "is not supported for checks executed by the monitoring core. "
            "Use the agent execution mode instead."
        )

    command = intent.command_line()
    if invalid := invalid_argument_macros(command):
        raise NXConfigurationError(
            f"Service {intent.service!r}: the command {command!r} uses the invalid argument "
            f"macro(s) {', '.join(invalid)}, arguments are counted from $ARG1$ on"
        )
    if (expected := highest_argument_macro(command)) != len(intent.arguments):
        raise NXConfigurationError(
            f"Service {intent.service!r}: the command {command!r} uses {expected} argument "
            f"macro(s), but {len(intent.arguments)} argument(s) are given"
        )

    logger.log(VERBOSE, "%s: executed by the monitoring core", intent.service)
    return DirectCheck(
        command=command,
        arguments=tuple(intent.arguments),
        script_source=intent.script_source,
        delegate_class=intent.delegate_class,
    )


def _agent_delegated_check(
    intent: CheckIntent,
    command_id: CommandID,
    agent: NodeAgent,
    config: ResolverConfig,
) -> AgentDelegatedCheck:
    if intent.arguments:
        raise NXConfigurationError(
            f"Service {intent.service!r}: arguments are not implemented for checks executed "
            "by the agent. Put the complete command line into the command."
        )

    plugin_dir = intent.effective_plugin_dir(config)
    command_line = absolute_plugin_path(intent.command_line(), plugin_dir)

    installed_script = None
    if intent.script_source is not None:
        installed_script = plugin_dir / script_file_name(intent.script_source)
        logger.log(VERBOSE, "%s: installing %s", intent.service, installed_script)
        agent.deployer.install_file(
            installed_script,
            owner=config.nagios_user,
            group=config.nagios_group,
            mode=config.plugin_mode,
            source=intent.script_source,
            requires=(config.nrpe_daemon_resource,),
        )

    if intent.run_as is not None:
        # The grant is for the plain command, sudo is what the daemon calls
        agent.policy.grant_elevation(
            command_id,
            acting_user=config.nrpe_user,
            target_user=intent.run_as,
            command=command_line,
            interactive=False,
        )
        command_line = elevated(command_line, intent.run_as, config)

    logger.log(VERBOSE, "%s: executed by the agent as %r", intent.service, command_line)
    agent.registrar.register_check(command_id, command_line)

    return AgentDelegatedCheck(
        local_command_line=command_line,
        script_source=intent.script_source,
        installed_script=installed_script,
        run_as=intent.run_as,
        delegate_class=config.check_proxy_delegate,
    )
