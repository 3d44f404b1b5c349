"""
L0 Data — static configuration.

- ``catalog``   — the pinned, ordered package catalog
- ``constants`` — defaults shared across layers
"""

from provisioner.core.services.provision.data.catalog import CATALOG  # noqa: F401
from provisioner.core.services.provision.data.constants import (  # noqa: F401
    DEFAULT_PREFIX,
    DEFAULT_REQUIRED_TOOLS,
)
