"""Exception hierarchy for the provisioning service.

Every failure the workflow can hit maps onto one of these classes, and the
HTTP status and response ``error`` text are derived from the class alone:

* ``RequestValidationError``: malformed or missing request fields (400).
* ``ConfigurationError``: appliance URL or token missing (500).
* ``ApplianceError`` and subclasses: the appliance rejected a call, answered
  with an undecodable body, or could not be reached.
* ``RequestLogError``: the durable request log could not be written.
* ``ProvisioningStepError`` and subclasses: a workflow step failed; wraps one
  of the errors above and names the step.
"""

from __future__ import annotations


class ProvisionerError(Exception):
    """Base class for all provisioning errors."""


class RequestValidationError(ProvisionerError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConfigurationError(ProvisionerError):
    pass


class ApplianceError(ProvisionerError):
    """Base class for failures talking to the storage appliance."""


class ApplianceRejectedError(ApplianceError):
    """The appliance answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(
            f"Appliance API request failed: {status_code} {reason} - {body}".rstrip()
        )


class ApplianceProtocolError(ApplianceError):
    """The appliance answered 2xx but the body could not be decoded."""


class ApplianceTransportError(ApplianceError):
    """The request never produced a response (DNS, TCP, TLS, timeout)."""


class RequestLogError(ProvisionerError):
    """Writing to the durable request log failed."""


class ProvisioningStepError(ProvisionerError):
    """A workflow step failed; ``cause`` is the underlying error."""

    step = "unknown"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DatasetCreationError(ProvisioningStepError):
    step = "create_dataset"


class ParentDatasetMissingError(DatasetCreationError):
    pass


class AccountCreationError(ProvisioningStepError):
    step = "create_account"


class AclApplyError(ProvisioningStepError):
    step = "apply_acl"


class ProjectLogError(ProvisioningStepError):
    step = "record_project_request"
