"""Domain types: requests, capacity tiers and appliance resources."""

from storage_provisioner.domain.models import AccessEntry, AccountSpec, AclSpec, DatasetSpec
from storage_provisioner.domain.requests import (
    PersonalRequest,
    ProjectRequest,
    ProvisionRequest,
    UsageClass,
    parse_provision_request,
)
from storage_provisioner.domain.tiers import TierAssignment, select_tier

__all__ = [
    "AccessEntry",
    "AccountSpec",
    "AclSpec",
    "DatasetSpec",
    "PersonalRequest",
    "ProjectRequest",
    "ProvisionRequest",
    "TierAssignment",
    "UsageClass",
    "parse_provision_request",
    "select_tier",
]
