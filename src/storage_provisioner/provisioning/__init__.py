"""Provisioning workflow."""

from storage_provisioner.provisioning.orchestrator import (
    Provisioner,
    ProvisioningOutcome,
    ProvisioningResult,
)

__all__ = ["Provisioner", "ProvisioningOutcome", "ProvisioningResult"]
