"""Storage appliance REST API access."""

from storage_provisioner.appliance.client import (
    DATASET_PATH,
    SET_ACL_PATH,
    USER_PATH,
    ApplianceClient,
)

__all__ = [
    "ApplianceClient",
    "DATASET_PATH",
    "SET_ACL_PATH",
    "USER_PATH",
]
