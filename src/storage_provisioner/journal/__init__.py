"""Durable request log."""

from storage_provisioner.journal.db import RequestLogStore
from storage_provisioner.journal.models import ProjectRequestRecord

__all__ = ["ProjectRequestRecord", "RequestLogStore"]
