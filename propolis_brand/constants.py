"""Global constants and path configuration for the propolis zone brand."""

from __future__ import annotations

import os
from pathlib import Path

BRAND_NAME = "propolis"

DEFAULT_CONFIG_PATH = Path("/etc/zones/propolis-brand.yaml")
DEFAULT_SOURCE_BINARY = Path("/opt/propolis/propolis-server")

# VNIC names are derived from the zone name; dladm enforces its own length limit.
VNIC_PREFIX = "vnic_"

# Layout under <zone-root>/root
ROOT_DIR_NAME = "root"
DEV_DIR = Path("dev")
ETC_DIR = Path("etc")
RUN_DIR = Path("var/run")
LOG_DIR = Path("var/log")
PROPOLIS_DIR = Path("opt/propolis")
PID_FILE_NAME = "propolis.pid"
LOG_FILE_NAME = "propolis.log"
BINARY_NAME = "propolis-server"
CONFIG_FILE_NAME = "config.toml"

DEFAULT_GRACE_PERIOD = 10
POLL_INTERVAL = 1.0
DEFAULT_LISTEN_ADDR = "0.0.0.0"
DEFAULT_LISTEN_PORT = 12400
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = {"trace", "debug", "info", "warn", "error"}

ZONE_RUNNING = "running"
SUPPORT_ACTIONS = ("prestate", "poststate")

# Interface states
IFACE_PRESENT = "present"
IFACE_ABSENT = "absent"

# Supervised process states
PROC_NOT_STARTED = "not_started"
PROC_RUNNING = "running"
PROC_STOPPING = "stopping"
PROC_STOPPED = "stopped"

TRUTHY = {"1", "true", "yes", "on"}

_LOG_VERBOSE = os.environ.get("PROPOLIS_LOG_VERBOSE", "").lower() in TRUTHY

_ENV_KEYS = {
    "source_binary": "PROPOLIS_SOURCE_BINARY",
    "uplink": "PROPOLIS_UPLINK",
    "grace_period": "PROPOLIS_GRACE_PERIOD",
    "listen_addr": "PROPOLIS_LISTEN_ADDR",
    "listen_port": "PROPOLIS_LISTEN_PORT",
    "log_level": "PROPOLIS_LOG_LEVEL",
}
