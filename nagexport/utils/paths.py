#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Default locations on the monitored nodes and on the monitoring server"""

import os
from pathlib import Path

# Node side
plugin_dir = Path("/usr/lib64/nagios/plugins")
sudo_binary = Path("/usr/bin/sudo")
nrpe_include_dir = Path("/etc/nrpe.d")
sudoers_include_dir = Path("/etc/sudoers.d")

# Server side. The declaration spool can be relocated for test and
# staging setups.
declaration_spool_dir = Path(
    os.environ.get("NAGEXPORT_SPOOL_DIR", "/var/lib/nagexport/declarations")
)
nagios_objects_file = Path("/etc/nagios/conf.d/nagexport_objects.cfg")
