# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Script source resolution: inline text, repository paths and URLs."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .config import HealthCheckConfig
from .errors import SourceNotFound, SourceReadError
from .http import HttpClient, HttpRequest, create_default_http_client
from .models import Provenance, ScriptSource
from .repository import JCR_CONTENT, ResourceResolver

logger = logging.getLogger(__name__)

JCR_FILE_URL_PREFIX = "jcr:"


def resolve_script_source(
    config: HealthCheckConfig,
    *,
    resource_resolver: ResourceResolver | None = None,
    http_client: HttpClient | None = None,
) -> ScriptSource:
    """Produce the literal script text for one execution. Never cached."""
    if not config.uses_url:
        return ScriptSource(text=config.script or "", provenance=Provenance.INLINE)

    script_url = (config.script_url or "").strip()
    if not script_url:
        raise SourceReadError("No script or script URL configured")

    if script_url.startswith(JCR_FILE_URL_PREFIX):
        path = script_url[len(JCR_FILE_URL_PREFIX) :]
        text = read_repository_script(resource_resolver, path)
        return ScriptSource(text=text, provenance=Provenance.REPOSITORY_PATH, location=script_url)

    return ScriptSource(text=read_url_script(script_url, http_client=http_client), provenance=Provenance.URL, location=script_url)


def read_repository_script(resource_resolver: ResourceResolver | None, path: str) -> str:
    if resource_resolver is None:
        raise SourceReadError(f"Could not load script from path {path}: no resource resolver available", location=path)
    try:
        content = resource_resolver.get_resource(path + JCR_CONTENT)
    except OSError as exc:
        raise SourceReadError(f"Could not load script from path {path}: {exc}", location=path) from exc
    if content is None:
        raise SourceNotFound(f"Could not load script from path {path}", location=path)
    try:
        return bytes(content).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SourceReadError(f"Could not load script from path {path}: {exc}", location=path) from exc


def read_url_script(url: str, *, http_client: HttpClient | None = None) -> str:
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise SourceReadError(f"Could not read file URL {url}: {exc}", location=url) from exc

    scheme = parts.scheme.lower()
    if scheme == "file":
        return _read_file_url(url, parts.netloc, parts.path)
    if scheme in {"http", "https"}:
        return _read_http_url(url, http_client)
    raise SourceReadError(f"Could not read file URL {url}: unsupported or missing URL scheme", location=url)


def _read_file_url(url: str, netloc: str, path: str) -> str:
    if netloc and netloc != "localhost":
        raise SourceReadError(f"Could not read file URL {url}: remote host {netloc!r} not supported", location=url)
    file_path = Path(url2pathname(path))
    try:
        with file_path.open("r", encoding="utf-8") as handle:
            return "\n".join(line.rstrip("\r\n") for line in handle)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Could not read file URL {url}: {exc}", location=url) from exc


def _read_http_url(url: str, http_client: HttpClient | None) -> str:
    owns_client = http_client is None
    client = http_client or create_default_http_client()
    try:
        response = client.request(HttpRequest(url=url))
    finally:
        if owns_client:
            client.close()

    if not response.ok:
        raise SourceReadError(
            f"Could not read file URL {url}: {response.error_type or 'error'}: {response.error_message}",
            location=url,
        )
    if response.status_code == 404:
        raise SourceNotFound(f"Could not read file URL {url}: not found (404)", location=url)
    if not response.is_success:
        raise SourceReadError(f"Could not read file URL {url}: HTTP {response.status_code}", location=url)
    if response.meta.get("body_truncated"):
        limit = response.meta.get("body_bytes_read")
        raise SourceReadError(f"Could not read file URL {url}: body exceeds {limit} bytes", location=url)
    logger.debug("Fetched script from %s (%d characters)", url, len(response.text))
    return response.text


__all__ = [
    "JCR_FILE_URL_PREFIX",
    "read_repository_script",
    "read_url_script",
    "resolve_script_source",
]
