# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-execution service acquisition tracking and the `scriptHelper` binding."""

from __future__ import annotations

import logging
from typing import Any

from .registry import ServiceReference, ServiceRegistry, type_name_of

logger = logging.getLogger(__name__)


class ResourceTracker:
    """
    Records every service reference acquired during one execution.

    `release_all` ungets each recorded reference exactly once; afterwards
    `outstanding` is zero even when an individual unget fails.
    """

    def __init__(self, registry: ServiceRegistry):
        self._registry = registry
        self._references: list[ServiceReference] = []
        self._by_type: dict[str, Any] = {}

    def acquire(self, reference: ServiceReference, type_name: str | None = None) -> Any:
        service = self._registry.get_service(reference)
        if service is not None:
            self._references.append(reference)
            if type_name is not None:
                self._by_type[type_name] = service
        return service

    def cached(self, type_name: str) -> Any:
        return self._by_type.get(type_name)

    @property
    def outstanding(self) -> int:
        return len(self._references)

    def release_all(self) -> int:
        references, self._references = self._references, []
        self._by_type.clear()
        released = 0
        for reference in references:
            try:
                self._registry.unget_service(reference)
                released += 1
            except Exception:  # noqa: BLE001
                logger.warning("Failed to unget service %s", reference.type_names, exc_info=True)
        if references:
            logger.debug("Released %d of %d acquired services", released, len(references))
        return released

    def __enter__(self) -> ResourceTracker:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.release_all()


class ScriptHelper:
    """Service lookup facade bound as `scriptHelper` (and `osgi`)."""

    def __init__(self, registry: ServiceRegistry, tracker: ResourceTracker):
        self._registry = registry
        self._tracker = tracker

    def getService(self, service_type: Any) -> Any:  # noqa: N802
        type_name = type_name_of(service_type)
        service = self._tracker.cached(type_name)
        if service is None:
            reference = self._registry.get_service_reference(type_name)
            if reference is not None:
                service = self._tracker.acquire(reference, type_name)
        return service

    def getServices(self, service_type: Any, filter: str | None = None) -> list[Any]:  # noqa: N802
        type_name = type_name_of(service_type)
        services = []
        for reference in self._registry.get_service_references(type_name, filter):
            service = self._tracker.acquire(reference)
            if service is not None:
                services.append(service)
        return services

    get_service = getService
    get_services = getServices


__all__ = ["ResourceTracker", "ScriptHelper"]
