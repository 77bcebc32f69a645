"""Supervision of the external Nextcloud sync client.

Architecture:
    Scheduler → RetryController → SyncInvoker → nextcloudcmd

Components:
- **SyncInvoker**: Runs the client once, filters its output, classifies the exit code
- **RetryController**: Bounded attempts with linear backoff, stops on shutdown
- **Scheduler**: One-shot or continuous cycles with interruptible sleep
- **ShutdownToken**: Cooperative cancellation set by SIGINT/SIGTERM
- **HealthReporter**: Timestamp marker for the container liveness probe
- **Preflight**: Directory, server and credential checks before the first cycle
- **MaintenanceTask**: Optional daily upgrade of the client package
"""

from ncsync.supervisor.health import HealthMarkerHandler, HealthReporter
from ncsync.supervisor.invoker import (
    INTERESTING_KEYWORDS,
    PREFLIGHT_TIMEOUT,
    SyncInvoker,
    is_interesting_line,
    normalize_server_url,
)
from ncsync.supervisor.maintenance import (
    DailyUpdateMarker,
    MaintenanceTask,
    PackageManager,
    detect_package_manager,
)
from ncsync.supervisor.preflight import (
    ensure_sync_directory,
    probe_credentials,
    probe_server,
    run_preflight,
)
from ncsync.supervisor.retry import BACKOFF_STEP, RetryController, linear_backoff
from ncsync.supervisor.scheduler import run_continuous, run_once
from ncsync.supervisor.shutdown import (
    SLEEP_CHUNK_SECONDS,
    ShutdownToken,
    install_signal_handlers,
    interruptible_sleep,
)

__all__ = [
    # Health
    "HealthMarkerHandler",
    "HealthReporter",
    # Invoker
    "INTERESTING_KEYWORDS",
    "PREFLIGHT_TIMEOUT",
    "SyncInvoker",
    "is_interesting_line",
    "normalize_server_url",
    # Maintenance
    "DailyUpdateMarker",
    "MaintenanceTask",
    "PackageManager",
    "detect_package_manager",
    # Preflight
    "ensure_sync_directory",
    "probe_credentials",
    "probe_server",
    "run_preflight",
    # Retry
    "BACKOFF_STEP",
    "RetryController",
    "linear_backoff",
    # Scheduler
    "run_continuous",
    "run_once",
    # Shutdown
    "SLEEP_CHUNK_SECONDS",
    "ShutdownToken",
    "install_signal_handlers",
    "interruptible_sleep",
]
