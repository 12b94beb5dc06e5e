#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""The node local agent setup used while declaring the checks of a node"""

import logging
from dataclasses import dataclass
from pathlib import Path

from nagexport.utils import paths, store

from nagexport.base.config import DEFAULT_CONFIG, ResolverConfig
from nagexport.base.execution import NodeAgent

from nagexport.agent.deployer import ScriptDeployer
from nagexport.agent.nrpe import NRPEConfig
from nagexport.agent.sudoers import SudoersPolicy

logger = logging.getLogger("nagexport.agent")


@dataclass(frozen=True)
class LocalAgent:
    nrpe: NRPEConfig
    sudoers: SudoersPolicy
    deployer: ScriptDeployer

    def as_node_agent(self) -> NodeAgent:
        return NodeAgent(registrar=self.nrpe, deployer=self.deployer, policy=self.sudoers)


def create_local_agent(config: ResolverConfig = DEFAULT_CONFIG) -> LocalAgent:
    deployer = ScriptDeployer()
    # The NRPE daemon is set up before any plugin is installed
    deployer.provide(config.nrpe_daemon_resource)
    return LocalAgent(nrpe=NRPEConfig(), sudoers=SudoersPolicy(), deployer=deployer)


def save_agent_config(
    agent: LocalAgent,
    nrpe_dir: Path = paths.nrpe_include_dir,
    sudoers_dir: Path = paths.sudoers_include_dir,
) -> None:
    nrpe_file = nrpe_dir / "nagexport.cfg"
    logger.info("Writing %d NRPE commands to %s", len(agent.nrpe.commands()), nrpe_file)
    store.save_text_to_file(nrpe_file, agent.nrpe.render(), mode=0o644)

    sudoers_file = sudoers_dir / "nagexport"
    if not agent.sudoers.grants():
        return
    logger.info("Writing %d sudo rules to %s", len(agent.sudoers.grants()), sudoers_file)
    store.save_text_to_file(sudoers_file, agent.sudoers.render(), mode=0o440)
