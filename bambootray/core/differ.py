"""Snapshot differ: classifies build completions into notification events.

A notification fires exactly once per build, at the moment it finishes:
the plan was building in the previous snapshot and is idle in the current
one.  Every other combination, including plans with no previous
counterpart, produces nothing.
"""

from __future__ import annotations

import logging

from bambootray.models.notifications import (
    SEVERITY_BY_KIND,
    NotificationEvent,
    NotificationKind,
)
from bambootray.models.plans import Snapshot

logger = logging.getLogger(__name__)

# (previous broken, current broken) -> kind
_TRANSITIONS: dict[tuple[bool, bool], NotificationKind] = {
    (True, False): NotificationKind.FIXED,
    (False, True): NotificationKind.BROKEN,
    (False, False): NotificationKind.SUCCEEDED,
    (True, True): NotificationKind.STILL_BROKEN,
}


def classify_transition(prev_broken: bool, curr_broken: bool) -> NotificationKind:
    """Return the notification kind for a completed build."""
    return _TRANSITIONS[(prev_broken, curr_broken)]


def diff_snapshots(previous: Snapshot, current: Snapshot) -> list[NotificationEvent]:
    """Compare two snapshots and return events in *current* order.

    Parameters
    ----------
    previous:
        The last known-good snapshot (empty on the first cycle).
    current:
        The snapshot just fetched.
    """
    by_key = {plan.plan_key: plan for plan in previous.plans}
    events: list[NotificationEvent] = []

    for curr in current.plans:
        prev = by_key.get(curr.plan_key)
        if prev is None:
            continue
        if not prev.build_active or curr.build_active:
            continue

        kind = classify_transition(prev.build_broken, curr.build_broken)
        events.append(
            NotificationEvent(
                plan_name=curr.plan_name,
                plan_key=curr.plan_key,
                kind=kind,
                severity=SEVERITY_BY_KIND[kind],
            )
        )
        logger.debug("Plan %s finished: %s", curr.plan_key, kind.value)

    return events
