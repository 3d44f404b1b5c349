"""
Provisioning service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → domain → resolver → detection → execution →
orchestration).
"""

# ── L0: Data ──
from provisioner.core.services.provision.data.catalog import CATALOG  # noqa: F401

# ── L1: Domain ──
from provisioner.core.services.provision.domain.errors import (  # noqa: F401
    BuildStepFailure,
    ChecksumMismatch,
    DependencyMissing,
    DownloadFailure,
    ExtractionFailure,
    InterruptedByOperator,
    PermissionDenied,
    ProvisionError,
    UnsupportedHost,
)
from provisioner.core.services.provision.domain.version import (  # noqa: F401
    is_at_least,
    parse_version_banner,
)

# ── L2: Resolver ──
from provisioner.core.services.provision.resolver.skip_plan import build_run_plan  # noqa: F401

# ── L3: Detection ──
from provisioner.core.services.provision.detection.host import check_host  # noqa: F401
from provisioner.core.services.provision.detection.system_deps import (  # noqa: F401
    find_missing,
    require_tools,
)
from provisioner.core.services.provision.detection.tool_version import (  # noqa: F401
    get_installed_version,
)

# ── L4: Execution ──
from provisioner.core.services.provision.execution.checksum import (  # noqa: F401
    digest_matches,
    file_digest,
)
from provisioner.core.services.provision.execution.download import fetch  # noqa: F401
from provisioner.core.services.provision.execution.privilege import PrivilegeManager  # noqa: F401
from provisioner.core.services.provision.execution.working_tree import WorkingTree  # noqa: F401

# ── L5: Orchestration ──
from provisioner.core.services.provision.orchestration.orchestrator import (  # noqa: F401
    BuildOrchestrator,
)
from provisioner.core.services.provision.orchestration.supervisor import (  # noqa: F401
    ProcessSupervisor,
)
