"""Records written to the durable request log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class ProjectRequestRecord:
    """One project-usage request. Never holds the account password."""

    user_name: str
    requested_quota_gb: float | None
    created_at: str = field(default_factory=_utc_now_iso)

    def to_row(self) -> dict[str, object]:
        return {
            "user_name": self.user_name,
            "requested_quota_gb": (
                None if self.requested_quota_gb is None else float(self.requested_quota_gb)
            ),
            "created_at": self.created_at,
        }
