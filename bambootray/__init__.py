"""bambootray: watch Bamboo build plans and announce finished builds.

A polling engine that diffs consecutive snapshots of CI build plans,
classifies finished builds (fixed, broken, still broken, succeeded) and
derives one aggregate tray state (idle, building, healthy, broken,
offline).  Notifications are routed to pluggable visual and spoken sinks.
"""

__version__ = "0.1.0"
__description__ = "Watch Bamboo build plans and announce finished builds"

from bambootray.core.engine import MonitorEngine
from bambootray.models.plans import BuildPlan, Snapshot

__all__ = ["MonitorEngine", "BuildPlan", "Snapshot", "__version__"]
