#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Node side declaration of Nagios checks and their aggregation.

Every node resolves its check intents into declarations and publishes them
into a shared store. The aggregator collects all declarations and renders
the Nagios object configuration from them."""
