"""
L0 Data — Shared constants.
"""

from __future__ import annotations

DEFAULT_PREFIX = "/usr/local"

# Host operating system the catalog's recipes are written for
# (``platform.system()`` value).
DEFAULT_REQUIRED_OS = "Darwin"

# DependencyChecker specifiers: a name, an absolute path, or
# ``a|b|c`` alternatives where any one satisfies the requirement.
DEFAULT_REQUIRED_TOOLS: tuple[str, ...] = (
    "make",
    "tar",
    "perl",
    "python3",
    "cc|clang|gcc",
    "c++|clang++|g++",
)

# Seconds between heartbeat dots while the orchestrator is alive.
HEARTBEAT_INTERVAL = 60.0

# Seconds between sudo timestamp refreshes during an escalated run.
SUDO_KEEPALIVE_INTERVAL = 240.0

# Connect timeout for URL probes and transfers (seconds).
CONNECT_TIMEOUT = 10

# Timeout for ``<tool> --version`` probes (seconds).
VERSION_PROBE_TIMEOUT = 10

USER_AGENT = "toolchain-provisioner/1.0"

# Interpreter directive forced onto script-installed entry points.
CANONICAL_SHEBANG = "#!/usr/bin/env python3"
