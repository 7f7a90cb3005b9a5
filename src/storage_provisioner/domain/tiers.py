"""Capacity tier selection.

A requested quota (in GB) maps to the pool the dataset is created in and the
quota actually applied. Thresholds are inclusive upper bounds, evaluated in
order; the first match wins. Requests above the largest tier are placed on
that tier rather than rejected, and a warning is logged so the policy can be
reviewed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

GIB = 1024**3
TIB = 1024 * GIB


@dataclass(frozen=True)
class TierAssignment:
    pool_id: str
    quota_bytes: int


@dataclass(frozen=True)
class Tier:
    max_requested_gb: float
    assignment: TierAssignment


TIERS: tuple[Tier, ...] = (
    Tier(100, TierAssignment("student-50-100", 100 * GIB)),
    Tier(500, TierAssignment("student-500", 500 * GIB)),
    Tier(1024, TierAssignment("student-1000", TIB)),
)

OVERFLOW_ASSIGNMENT = TierAssignment("student-1000", TIB)


def select_tier(requested_quota_gb: float) -> TierAssignment:
    """Return the tier for a positive ``requested_quota_gb``.

    Raises ``ValueError`` for non-positive input; callers validate first.
    """
    if not requested_quota_gb > 0:
        raise ValueError(f"requested quota must be positive, got {requested_quota_gb!r}")

    for tier in TIERS:
        if requested_quota_gb <= tier.max_requested_gb:
            assignment = tier.assignment
            break
    else:
        assignment = OVERFLOW_ASSIGNMENT
        logger.warning(
            "Requested quota %sGB exceeds %sGB. Assigning to pool %s with quota %d. "
            "Review policy.",
            requested_quota_gb,
            TIERS[-1].max_requested_gb,
            assignment.pool_id,
            assignment.quota_bytes,
        )

    logger.info(
        "Storage quota %sGB maps to pool %s, quota bytes %d",
        requested_quota_gb,
        assignment.pool_id,
        assignment.quota_bytes,
    )
    return assignment
