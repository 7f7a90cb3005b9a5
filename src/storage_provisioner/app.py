"""Application context assembly."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from storage_provisioner.appliance.client import ApplianceClient
from storage_provisioner.config import Settings
from storage_provisioner.errors import ConfigurationError
from storage_provisioner.journal.db import RequestLogStore
from storage_provisioner.provisioning.orchestrator import Provisioner, require_appliance_settings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide dependencies, built once from explicit settings.

    ``provisioner`` and ``appliance`` are ``None`` when the appliance URL or
    token is missing; the HTTP layer answers provisioning requests with a
    configuration error in that case.
    """

    settings: Settings
    log_store: RequestLogStore
    appliance: ApplianceClient | None = None
    provisioner: Provisioner | None = None

    async def aclose(self) -> None:
        if self.appliance is not None:
            await self.appliance.aclose()
        self.log_store.close()


def build_app_context(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    log_store = RequestLogStore(settings.storage.sqlite_path, wal=settings.storage.sqlite_wal)
    context = AppContext(settings=settings, log_store=log_store)

    try:
        base_url, api_token = require_appliance_settings(settings.appliance)
    except ConfigurationError as exc:
        logger.error("%s Provisioning is disabled.", exc)
        return context

    context.appliance = ApplianceClient(
        base_url,
        api_token,
        verify_tls=settings.appliance.verify_tls,
        timeout=settings.appliance.timeout_seconds,
        transport=transport,
    )
    context.provisioner = Provisioner(
        context.appliance,
        log_store,
        default_pool=settings.appliance.default_pool,
    )
    return context
