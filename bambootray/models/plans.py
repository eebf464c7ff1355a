"""Build plan and snapshot models: one immutable view per poll cycle."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

BUILDING = "Building"
IDLE = "Idle"
SUCCESSFUL = "Successful"
FAILED = "Failed"
OFFLINE = "Offline"


class BuildPlan(BaseModel):
    """One monitored plan at one point in time.

    ``build_active`` and ``build_broken`` drive notification classification;
    the remaining fields are carried through for display only.
    """

    model_config = ConfigDict(frozen=True)

    plan_key: str
    plan_name: str = ""
    short_plan_name: str = ""
    project_name: str = ""
    server_name: str = ""
    build_active: bool = False
    build_broken: bool = False
    build_activity: str = IDLE
    build_status: str = ""
    last_build_time: str = ""
    last_build_duration: str = ""
    last_build_number: str = ""
    last_vcs_revision: str = ""
    successful_test_count: str = ""
    failed_test_count: str = ""
    result_url: str = ""

    @model_validator(mode="after")
    def _activity_matches_active(self) -> BuildPlan:
        if (self.build_activity == BUILDING) != self.build_active:
            raise ValueError(
                f"build_activity {self.build_activity!r} disagrees with build_active={self.build_active}"
            )
        return self

    @property
    def row_icon(self) -> str:
        """List-row indicator key: Building, Successful, Failed or Offline."""
        if self.build_activity == BUILDING:
            return BUILDING
        return self.build_status or OFFLINE


class Snapshot(BaseModel):
    """All plan states captured atomically by one poll cycle.

    Snapshots are never merged.  Each one fully replaces the previous as
    the comparison baseline.
    """

    model_config = ConfigDict(frozen=True)

    plans: tuple[BuildPlan, ...] = ()
    captured_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @model_validator(mode="after")
    def _unique_plan_keys(self) -> Snapshot:
        seen: set[str] = set()
        for plan in self.plans:
            if plan.plan_key in seen:
                raise ValueError(f"Duplicate plan_key in snapshot: {plan.plan_key}")
            seen.add(plan.plan_key)
        return self

    def get(self, plan_key: str) -> BuildPlan | None:
        """Return the plan with *plan_key*, or ``None`` if absent."""
        for plan in self.plans:
            if plan.plan_key == plan_key:
                return plan
        return None

    @property
    def building(self) -> bool:
        """True if any plan has a build running."""
        return any(p.build_active for p in self.plans)

    @property
    def broken(self) -> bool:
        """True if any plan's latest completed build failed."""
        return any(p.build_broken for p in self.plans)
