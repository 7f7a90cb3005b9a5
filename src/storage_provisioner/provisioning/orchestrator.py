"""Provisioning workflow.

A request is carried out as an ordered list of remote steps:

* personal: create dataset -> create account -> apply ACL
* project:  create account -> record request in the durable log

Steps run one after another and the first failure ends the request. There
is no cross-resource transaction on the appliance and nothing is rolled back:
when a later step fails, resources created by earlier steps stay in place and
are reported in a warning so an operator can clean them up.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from storage_provisioner.config import DEFAULT_POOL_NAME, ApplianceSettings
from storage_provisioner.domain.models import (
    AccountSpec,
    AclSpec,
    DatasetSpec,
    dataset_path,
    mount_path,
)
from storage_provisioner.domain.requests import (
    PersonalRequest,
    ProjectRequest,
    ProvisionRequest,
    parse_provision_request,
)
from storage_provisioner.domain.tiers import select_tier
from storage_provisioner.errors import (
    AccountCreationError,
    AclApplyError,
    ApplianceError,
    ConfigurationError,
    DatasetCreationError,
    ParentDatasetMissingError,
    ProjectLogError,
    ProvisionerError,
    RequestLogError,
    RequestValidationError,
)
from storage_provisioner.journal.models import ProjectRequestRecord

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Invalid input data"
FAILURE_MESSAGE = "Failed to process request"
CONFIGURATION_ERROR_MESSAGE = "Server configuration error"

PARENT_MISSING_SIGNATURE = "Parent dataset does not exist"


class ApplianceOperations(Protocol):
    async def create_dataset(self, spec: DatasetSpec) -> Any: ...

    async def create_user(self, spec: AccountSpec) -> Any: ...

    async def set_acl(self, spec: AclSpec) -> Any: ...


class RequestLogSink(Protocol):
    def record_project_request(self, record: ProjectRequestRecord) -> int: ...


@dataclass
class ProvisioningOutcome:
    """Which steps of one request completed."""

    dataset_created: bool = False
    account_created: bool = False
    acl_applied: bool = False
    log_recorded: bool = False
    pool_id: str | None = None

    def created_resources(self) -> list[str]:
        created = []
        if self.dataset_created:
            created.append("dataset")
        if self.account_created:
            created.append("account")
        if self.acl_applied:
            created.append("acl")
        return created


@dataclass(frozen=True)
class ProvisioningResult:
    status_code: int
    message: str
    error: str | None = None
    outcome: ProvisioningOutcome = field(default_factory=ProvisioningOutcome, compare=False)

    def to_body(self) -> dict[str, str]:
        body = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


def configuration_error_result() -> ProvisioningResult:
    return ProvisioningResult(
        500,
        CONFIGURATION_ERROR_MESSAGE,
        "Appliance URL or API token is not configured.",
    )


def require_appliance_settings(settings: ApplianceSettings) -> tuple[str, str]:
    """Return ``(base_url, api_token)`` or raise ``ConfigurationError``."""
    if not settings.base_url or not settings.api_token:
        raise ConfigurationError("Appliance URL or API token is not configured.")
    return settings.base_url, settings.api_token


class Provisioner:
    def __init__(
        self,
        appliance: ApplianceOperations,
        log_sink: RequestLogSink,
        *,
        default_pool: str = DEFAULT_POOL_NAME,
    ) -> None:
        self._appliance = appliance
        self._log_sink = log_sink
        self._default_pool = default_pool

    async def provision(self, payload: Mapping[str, Any] | Any) -> ProvisioningResult:
        """Validate *payload* and run the workflow for it.

        Never raises for request, appliance or log failures; they are logged and
        turned into a 400 or 500 result.
        """
        try:
            request = parse_provision_request(payload)
        except RequestValidationError as exc:
            logger.warning("Rejected provisioning request: %s", exc)
            return ProvisioningResult(400, INVALID_INPUT_MESSAGE, str(exc))

        logger.info(
            "Processing request for user: %s, usage type: %s",
            request.identity,
            request.usage_class.value,
        )
        outcome = ProvisioningOutcome()
        try:
            await self.run(request, outcome)
        except ProvisionerError as exc:
            logger.exception(
                "Error processing request for user %s (step: %s)",
                request.identity,
                getattr(exc, "step", "request"),
            )
            self._report_leftovers(request, outcome)
            return ProvisioningResult(500, FAILURE_MESSAGE, str(exc), outcome)
        except Exception:
            logger.exception("Unexpected error processing request for user %s", request.identity)
            self._report_leftovers(request, outcome)
            return ProvisioningResult(500, FAILURE_MESSAGE, "An unknown error occurred", outcome)

        return ProvisioningResult(200, self._success_message(request, outcome), outcome=outcome)

    async def run(self, request: ProvisionRequest, outcome: ProvisioningOutcome) -> None:
        """Execute the steps for *request*, updating *outcome* as they complete."""
        if isinstance(request, PersonalRequest):
            await self._run_personal(request, outcome)
        else:
            await self._run_project(request, outcome)

    async def _run_personal(self, request: PersonalRequest, outcome: ProvisioningOutcome) -> None:
        logger.info("Personal usage: determining pool and creating dataset")
        tier = select_tier(request.requested_quota_gb)
        outcome.pool_id = tier.pool_id
        dataset = DatasetSpec(
            path=dataset_path(tier.pool_id, request.identity),
            quota_bytes=tier.quota_bytes,
        )

        await self._create_dataset(dataset)
        outcome.dataset_created = True

        await self._create_account(self._account_for(request, dataset.mount_path))
        outcome.account_created = True

        await self._apply_acl(AclSpec.for_owner(dataset.mount_path, request.identity))
        outcome.acl_applied = True

    async def _run_project(self, request: ProjectRequest, outcome: ProvisioningOutcome) -> None:
        home = mount_path(dataset_path(self._default_pool, request.identity))
        await self._create_account(self._account_for(request, home))
        outcome.account_created = True

        logger.info("Project usage: recording request")
        await self._record_project_request(
            ProjectRequestRecord(
                user_name=request.identity,
                requested_quota_gb=request.requested_quota_gb,
            )
        )
        outcome.log_recorded = True

    @staticmethod
    def _account_for(request: ProvisionRequest, home: str) -> AccountSpec:
        return AccountSpec(
            username=request.identity,
            secret=request.secret,
            display_name=request.identity,
            home_directory=home,
        )

    async def _create_dataset(self, spec: DatasetSpec) -> None:
        try:
            await self._appliance.create_dataset(spec)
        except ApplianceError as exc:
            logger.error("Failed to create dataset %s, aborting user creation", spec.path)
            if PARENT_MISSING_SIGNATURE in str(exc):
                raise ParentDatasetMissingError(
                    f"Parent dataset for {spec.path} does not exist. Please create it first.",
                    cause=exc,
                ) from exc
            raise DatasetCreationError(
                f"Failed to create prerequisite dataset {spec.path}. User not created. "
                f"Original error: {exc}",
                cause=exc,
            ) from exc
        logger.info("Dataset %s created successfully", spec.path)

    async def _create_account(self, spec: AccountSpec) -> None:
        try:
            await self._appliance.create_user(spec)
        except ApplianceError as exc:
            raise AccountCreationError(
                f"Account creation failed for user {spec.username}: {exc}", cause=exc
            ) from exc
        logger.info("User %s created successfully", spec.username)

    async def _apply_acl(self, spec: AclSpec) -> None:
        try:
            await self._appliance.set_acl(spec)
        except ApplianceError as exc:
            raise AclApplyError(
                f"Failed to apply ACL on {spec.target_path}: {exc}", cause=exc
            ) from exc
        logger.info("ACL set successfully for %s", spec.target_path)

    async def _record_project_request(self, record: ProjectRequestRecord) -> None:
        try:
            await asyncio.to_thread(self._log_sink.record_project_request, record)
        except RequestLogError as exc:
            raise ProjectLogError(
                f"Failed to save project request for user {record.user_name}: {exc}",
                cause=exc,
            ) from exc
        logger.info("Project request for user %s saved", record.user_name)

    @staticmethod
    def _report_leftovers(request: ProvisionRequest, outcome: ProvisioningOutcome) -> None:
        created = outcome.created_resources()
        if created:
            logger.warning(
                "Request for user %s failed after creating %s on the appliance; "
                "these resources were not rolled back",
                request.identity,
                ", ".join(created),
            )

    @staticmethod
    def _success_message(request: ProvisionRequest, outcome: ProvisioningOutcome) -> str:
        message = f"Appliance user {request.identity} created successfully."
        if outcome.dataset_created and outcome.acl_applied:
            message += (
                f" Personal dataset created in pool {outcome.pool_id} and ACL configured."
            )
        elif outcome.log_recorded:
            message += " Project request logged."
        return message
