#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Resolve check intents of a node into published declarations

This is the entry point of the node side. Resolving an intent is
deterministic: the same intent on the same node always results in the
same declaration, so declaring all checks of a node again on every run
only rewrites identical records.
"""

import logging

from nagexport.utils.servicename import command_id_of

from nagexport.base.command_line import (
    compile_check_proxy_command_line,
    compile_direct_command_line,
)
from nagexport.base.config import ConfigSource, DEFAULT_CONFIG, NodeFacts, ResolverConfig
from nagexport.base.declaration import CheckDeclaration, DeclarationStore, ResolvedCheck
from nagexport.base.execution import DirectCheck, NodeAgent, route_check
from nagexport.base.intent import CheckIntent
from nagexport.base.metadata import resolve_metadata

logger = logging.getLogger("nagexport.check")


def resolve_check(
    intent: CheckIntent,
    facts: NodeFacts,
    source: ConfigSource,
    agent: NodeAgent,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> ResolvedCheck:
    """Derive how and under which name the check is executed

    Raises:
        NXConfigurationError: The intent combines options that are not
            supported by its execution mode. Nothing is registered with
            the agent in that case.
    """
    command_id = command_id_of(intent.service)
    metadata = resolve_metadata(
        intent.service, intent.notes_url_template, facts, source, config
    )
    strategy = route_check(intent, command_id, agent, config)

    if isinstance(strategy, DirectCheck):
        command_line = compile_direct_command_line(strategy.command)
        arguments = strategy.arguments
    else:
        command_line = compile_check_proxy_command_line(
            str(intent.address), intent.timeout, command_id, config
        )
        arguments = ()

    return ResolvedCheck(
        command_id=command_id,
        command_line=command_line,
        arguments=arguments,
        mode=strategy.mode,
        script_source=strategy.script_source,
        delegate_class=strategy.delegate_class,
        icon_image=metadata.icon_image,
        notes_url=metadata.notes_url,
        hostgroup=metadata.hostgroup,
        parents=metadata.parents,
    )


def declare_check(
    intent: CheckIntent,
    facts: NodeFacts,
    source: ConfigSource,
    agent: NodeAgent,
    store: DeclarationStore,
    config: ResolverConfig = DEFAULT_CONFIG,
) -> CheckDeclaration:
    """Resolve the intent and publish the declaration for the aggregator"""
    declaration = CheckDeclaration(
        host_name=intent.host_name,
        service=intent.service,
        address=intent.address,
        check_interval=intent.check_interval,
        check=resolve_check(intent, facts, source, agent, config),
    )
    store.publish(declaration.key, declaration)
    logger.info("Declared %s on %s", intent.service, intent.host_name)
    return declaration
