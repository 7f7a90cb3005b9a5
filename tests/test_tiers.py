from __future__ import annotations

import logging

import pytest

from storage_provisioner.domain.tiers import GIB, TIB, TierAssignment, select_tier


@pytest.mark.parametrize(
    ("requested", "pool", "quota"),
    [
        (0.5, "student-50-100", 100 * GIB),
        (50, "student-50-100", 100 * GIB),
        (100, "student-50-100", 100 * GIB),
        (100.01, "student-500", 500 * GIB),
        (500, "student-500", 500 * GIB),
        (501, "student-1000", TIB),
        (1024, "student-1000", TIB),
        (1024.5, "student-1000", TIB),
    ],
)
def test_select_tier_boundaries(requested, pool, quota) -> None:
    assert select_tier(requested) == TierAssignment(pool, quota)


def test_overflow_is_assigned_largest_tier_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="storage_provisioner.domain.tiers"):
        assignment = select_tier(4096)

    assert assignment == TierAssignment("student-1000", TIB)
    assert "Review policy" in caplog.text


def test_just_above_largest_threshold_warns(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="storage_provisioner.domain.tiers"):
        assignment = select_tier(1024.5)

    assert assignment == TierAssignment("student-1000", TIB)
    assert "Review policy" in caplog.text


def test_within_range_does_not_warn(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="storage_provisioner.domain.tiers"):
        select_tier(1024)
    assert caplog.records == []


def test_byte_multiples_are_binary() -> None:
    assert GIB == 1024 * 1024 * 1024
    assert TIB == 1024 * GIB


def test_select_tier_is_deterministic() -> None:
    assert select_tier(250) == select_tier(250)


@pytest.mark.parametrize("requested", [0, -1, float("nan")])
def test_non_positive_rejected(requested) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        select_tier(requested)
