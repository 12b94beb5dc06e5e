#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Optional metadata of a declared check

All values are inherited in the same way: an explicit value of the check
wins over the shared configuration, which wins over the built-in default.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from nagexport.utils.servicename import ServiceName

from nagexport.base.config import ConfigSource, lookup_layered, NodeFacts, ResolverConfig

logger = logging.getLogger("nagexport.metadata")


@dataclass(frozen=True)
class CheckMetadata:
    icon_image: str
    notes_url: str | None
    hostgroup: str
    parents: tuple[str, ...] | None


def notes_url_of(
    service: ServiceName,
    notes_url_template: str | None,
    source: ConfigSource,
    config: ResolverConfig,
) -> str | None:
    template = lookup_layered(notes_url_template, source, config.config_keys.notes_url, None)
    if template is None:
        return None
    return _interpolate(template, service)


def _interpolate(template: str, service: ServiceName) -> str:
    """Put the service name into a printf style template

    >>> _interpolate("https://wiki/checks/%s", "disk/root")
    'https://wiki/checks/disk/root'
    >>> _interpolate("https://wiki/checks", "disk")
    'https://wiki/checks'
    """
    if "%s" not in template:
        return template
    return template.replace("%s", service)


def hostgroup_of(facts: NodeFacts, source: ConfigSource, config: ResolverConfig) -> str:
    hostgroup = lookup_layered(None, source, config.config_keys.hostgroup, facts.zone)
    # Nagios takes a comma separated list, like the parents
    if isinstance(hostgroup, Sequence) and not isinstance(hostgroup, str):
        return ",".join(str(g).strip() for g in hostgroup if str(g).strip()) or facts.zone
    return str(hostgroup)


def parents_of(source: ConfigSource, config: ResolverConfig) -> tuple[str, ...] | None:
    parents = lookup_layered(None, source, config.config_keys.parents, None)
    if parents is None:
        return None
    # Nagios takes a comma separated list, the shared configuration may
    # hold that string or a real list
    if isinstance(parents, str):
        names = parents.split(",")
    elif isinstance(parents, Sequence):
        names = [str(p) for p in parents]
    else:
        names = [str(parents)]
    return tuple(n.strip() for n in names if n.strip()) or None


def icon_image_of(operatingsystem: str, config: ResolverConfig) -> str:
    return config.os_icons.get(operatingsystem, config.default_icon)


def resolve_metadata(
    service: ServiceName,
    notes_url_template: str | None,
    facts: NodeFacts,
    source: ConfigSource,
    config: ResolverConfig,
) -> CheckMetadata:
    metadata = CheckMetadata(
        icon_image=icon_image_of(facts.operatingsystem, config),
        notes_url=notes_url_of(service, notes_url_template, source, config),
        hostgroup=hostgroup_of(facts, source, config),
        parents=parents_of(source, config),
    )
    logger.debug("Metadata of %s: %r", service, metadata)
    return metadata
