# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scripted health check: one probe execution from source to result."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .config import HealthCheckConfig, ScriptCheckSettings, load_settings
from .context import RESOURCE_RESOLVER_BINDING, SESSION_BINDING, build_context
from .engines import EngineRegistry
from .errors import SetupError, categorize_exception, error_category_to_reason
from .http import HttpClient
from .models import Result, ResultLog
from .reconcile import classify_return, reconcile
from .repository import ResourceResolver, ResourceResolverFactory
from .runner import run_script
from .services import InMemoryServiceRegistry, ServiceRegistry
from .sources import resolve_script_source

logger = logging.getLogger(__name__)


class ProbeStage(str, Enum):
    START = "START"
    SOURCE_RESOLVED = "SOURCE_RESOLVED"
    ENGINE_RESOLVED = "ENGINE_RESOLVED"
    BOUND = "BOUND"
    EXECUTED = "EXECUTED"
    RECONCILED = "RECONCILED"
    DONE = "DONE"


class ScriptedHealthCheck:
    """
    Health check that runs an arbitrary script.

    The script sees these bindings: `log` (the result log, which defines the
    outcome), `scriptHelper`/`osgi` (`getService(type)` and
    `getServices(type, filter)`; every service obtained this way is released
    when the script ends), `bundleContext` (the host service registry) and,
    when a resource resolver factory is configured, `resourceResolver` and
    `session`. The script need not return anything; a returned Result is
    merged into `log`, any other value is logged as INFO.

    `execute` never raises for script, source or engine problems. Only a
    failure to obtain the resource resolver escapes, as SetupError.
    """

    def __init__(
        self,
        config: HealthCheckConfig,
        *,
        service_registry: ServiceRegistry | None = None,
        engine_registry: EngineRegistry | None = None,
        resource_resolver_factory: ResourceResolverFactory | None = None,
        http_client: HttpClient | None = None,
        extra_bindings: Mapping[str, Any] | None = None,
        settings: ScriptCheckSettings | None = None,
    ):
        self.config = config
        self.service_registry = service_registry if service_registry is not None else InMemoryServiceRegistry()
        self.engine_registry = engine_registry or EngineRegistry()
        self.resource_resolver_factory = resource_resolver_factory
        self.http_client = http_client
        self.extra_bindings = dict(extra_bindings or {})
        self.settings = settings or load_settings()
        logger.info("Activated Scripted HC %s with %s", config.name, config.source_label)

    @classmethod
    def from_mapping(cls, properties: Mapping[str, Any], **kwargs: Any) -> ScriptedHealthCheck:
        return cls(HealthCheckConfig.from_mapping(properties), **kwargs)

    def execute(self) -> Result:
        log = ResultLog()
        metadata: dict[str, Any] = {
            "language": self.config.language,
            "stage": ProbeStage.START.value,
        }
        resolver = self._open_resource_resolver()
        try:
            self._run_pipeline(log, resolver, metadata)
            if "error_category" not in metadata:
                metadata["stage"] = ProbeStage.DONE.value
        finally:
            if resolver is not None:
                self._close_resource_resolver(resolver)
        return Result.from_log(log, name=self.config.name, tags=self.config.tags, metadata=metadata)

    def _open_resource_resolver(self) -> ResourceResolver | None:
        if self.resource_resolver_factory is None:
            return None
        try:
            return self.resource_resolver_factory.get_service_resource_resolver()
        except SetupError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SetupError(f"Could not get resource resolver: {exc}") from exc

    def _close_resource_resolver(self, resolver: ResourceResolver) -> None:
        try:
            resolver.close()
        except Exception:  # noqa: BLE001
            logger.warning("Failed to close resource resolver for %s", self.config.name, exc_info=True)

    def _bindings_for(self, resolver: ResourceResolver | None) -> dict[str, Any]:
        bindings: dict[str, Any] = {}
        if resolver is not None:
            bindings[RESOURCE_RESOLVER_BINDING] = resolver
            bindings[SESSION_BINDING] = getattr(resolver, "session", None)
        bindings.update(self.extra_bindings)
        return bindings

    def _run_pipeline(self, log: ResultLog, resolver: ResourceResolver | None, metadata: dict[str, Any]) -> None:
        if self.config.ignored_script_url:
            log.debug("Both 'script' and 'scriptUrl' (={}) are configured, ignoring 'scriptUrl'", self.config.ignored_script_url)

        try:
            source = resolve_script_source(self.config, resource_resolver=resolver, http_client=self.http_client)
            metadata.update(provenance=source.provenance.value, location=source.location)
            metadata["stage"] = ProbeStage.SOURCE_RESOLVED.value
            log.info("Executing script {} ({} lines)...", source.label, source.line_count)

            engine = self.engine_registry.get_engine(self.config.language)
            metadata["stage"] = ProbeStage.ENGINE_RESOLVED.value

            context = build_context(self.service_registry, log, self._bindings_for(resolver))
            metadata["stage"] = ProbeStage.BOUND.value

            if self.settings.debug_script_source:
                log.debug(source.text)
            value = run_script(engine, source.text, context)
            metadata["stage"] = ProbeStage.EXECUTED.value

            reconcile(log, classify_return(value, log), log_script_result=self.settings.log_script_result)
            metadata["stage"] = ProbeStage.RECONCILED.value
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            metadata.update(error_category=category.value, error_reason=error_category_to_reason(category))
            logger.debug("Scripted HC %s failed after stage %s", self.config.name, metadata["stage"], exc_info=True)
            log.health_check_error("Exception while executing script: {}: {}", type(exc).__name__, exc, exc)


__all__ = ["ProbeStage", "ScriptedHealthCheck"]
