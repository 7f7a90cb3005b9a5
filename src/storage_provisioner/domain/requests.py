"""Inbound provisioning requests.

The JSON body is validated with pydantic and then narrowed into one of two
request variants. Only ``PersonalRequest`` carries a guaranteed positive
quota, so code that selects a tier can only be reached with one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from storage_provisioner.errors import RequestValidationError


class UsageClass(str, Enum):
    PERSONAL = "personal"
    PROJECT = "project"


@dataclass(frozen=True)
class PersonalRequest:
    identity: str
    secret: str = field(repr=False)
    requested_quota_gb: float
    usage_class: Literal[UsageClass.PERSONAL] = field(default=UsageClass.PERSONAL, init=False)


@dataclass(frozen=True)
class ProjectRequest:
    identity: str
    secret: str = field(repr=False)
    requested_quota_gb: float | None = None
    usage_class: Literal[UsageClass.PROJECT] = field(default=UsageClass.PROJECT, init=False)


ProvisionRequest = Union[PersonalRequest, ProjectRequest]


class ProvisionForm(BaseModel):
    """Wire shape of the request body: ``{name, password, usageType, storageQuota}``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: StrictStr = Field(min_length=1)
    password: StrictStr = Field(min_length=1, repr=False)
    usage_type: UsageClass = Field(alias="usageType")
    storage_quota: Any = Field(default=None, alias="storageQuota")

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        if "/" in value:
            raise ValueError("name must not contain '/'")
        return value


def _positive_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value or value <= 0:  # NaN or non-positive
        return None
    return value


def _describe_validation_error(exc: ValidationError) -> tuple[str, str | None]:
    first = exc.errors()[0]
    location = first.get("loc") or ()
    field_name = str(location[0]) if location else None
    message = first.get("msg", "invalid value")
    if field_name:
        return f"{field_name}: {message}", field_name
    return message, None


def parse_provision_request(payload: Mapping[str, Any] | Any) -> ProvisionRequest:
    """Validate a decoded JSON body and return the matching request variant.

    Raises ``RequestValidationError`` naming the first offending field.
    """
    if not isinstance(payload, Mapping):
        raise RequestValidationError("request body must be a JSON object")

    try:
        form = ProvisionForm.model_validate(dict(payload))
    except ValidationError as exc:
        message, field_name = _describe_validation_error(exc)
        raise RequestValidationError(message, field=field_name) from None

    quota = _positive_number(form.storage_quota)
    if form.usage_type is UsageClass.PERSONAL:
        if quota is None:
            raise RequestValidationError(
                "storageQuota: a positive number is required for personal usage",
                field="storageQuota",
            )
        return PersonalRequest(form.name, form.password, quota)
    return ProjectRequest(form.name, form.password, quota)
