"""Async client for the storage appliance REST API (``/api/v2.0``)."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from storage_provisioner.domain.models import AccountSpec, AclSpec, DatasetSpec
from storage_provisioner.errors import (
    ApplianceProtocolError,
    ApplianceRejectedError,
    ApplianceTransportError,
)
from storage_provisioner.utils.http import normalize_base_url
from storage_provisioner.utils.masking import redact_sensitive_fields

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2.0"
DATASET_PATH = f"{API_PREFIX}/pool/dataset"
USER_PATH = f"{API_PREFIX}/user"
SET_ACL_PATH = f"{API_PREFIX}/filesystem/setacl"


class ApplianceClient:
    """Bearer-token JSON client for the appliance.

    Each call is a single request/response exchange with no retries. Any
    non-2xx answer raises ``ApplianceRejectedError``; a 2xx answer whose JSON
    body cannot be decoded raises ``ApplianceProtocolError``; failures before a
    response arrives raise ``ApplianceTransportError``.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        *,
        verify_tls: bool = True,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url, label="appliance base_url")
        client_kwargs: dict[str, Any] = {
            "headers": {
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            "verify": verify_tls,
        }
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_dataset(self, spec: DatasetSpec) -> Any:
        return await self.request("POST", DATASET_PATH, spec.to_payload())

    async def create_user(self, spec: AccountSpec) -> Any:
        return await self.request("POST", USER_PATH, spec.to_payload())

    async def set_acl(self, spec: AclSpec) -> Any:
        return await self.request("POST", SET_ACL_PATH, spec.to_payload())

    async def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send one API call and decode the response.

        Returns ``None`` for empty bodies, the raw text for non-JSON bodies,
        and the decoded document otherwise.
        """
        url = f"{self.base_url}{path}"
        logger.info("Calling appliance API: %s %s", method, url)
        if payload is not None:
            logger.debug(
                "Payload: %s",
                json.dumps(redact_sensitive_fields(payload), indent=2, sort_keys=True),
            )

        try:
            response = await self._client.request(method, url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Appliance API %s %s failed before a response: %s", method, url, exc)
            raise ApplianceTransportError(
                f"Appliance API request {method} {url} failed: {exc}"
            ) from exc

        if not response.is_success:
            body = response.text
            logger.error("Appliance API error (%d): %s", response.status_code, body)
            raise ApplianceRejectedError(response.status_code, response.reason_phrase, body)

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            logger.info("Appliance API response: no content")
            return None

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type.lower():
            logger.info("Appliance API response: not JSON (%s)", content_type or "no type")
            logger.debug("Appliance API response text: %s", response.text)
            return response.text

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Error parsing JSON response: %s", exc)
            raise ApplianceProtocolError("Failed to parse appliance API JSON response.") from exc

        logger.debug("Appliance API response: %s", redact_sensitive_fields(data))
        return data
