# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Content repository collaborators used by `jcr:` script URLs.

The host supplies a ResourceResolverFactory; one resolver is obtained per
probe execution, exposed to the script as `resourceResolver` (and its
session as `session`) and closed when the execution ends.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from .errors import SetupError

logger = logging.getLogger(__name__)

JCR_CONTENT = "/jcr:content"


class ResourceResolver(Protocol):
    session: Any

    def get_resource(self, path: str) -> bytes | None:
        """Return the binary content stored at `path`, or None when no such node exists."""
        ...

    def close(self) -> None: ...


class ResourceResolverFactory(Protocol):
    def get_service_resource_resolver(self) -> ResourceResolver:
        """Raise SetupError when a resolver cannot be obtained."""
        ...


def _file_path(path: str) -> str:
    if path.endswith(JCR_CONTENT):
        path = path[: -len(JCR_CONTENT)]
    return "/" + path.strip("/")


class InMemoryResourceResolver:
    def __init__(self, contents: Mapping[str, bytes], session: Any = None):
        self._contents = contents
        self.session = session
        self.closed = False

    def get_resource(self, path: str) -> bytes | None:
        return self._contents.get(_file_path(path))

    def close(self) -> None:
        self.closed = True


class InMemoryRepository:
    """Dict-backed repository; each file node exposes its bytes as its content node."""

    def __init__(self, contents: Mapping[str, bytes | str] | None = None, session: Any = None):
        self._contents: dict[str, bytes] = {}
        self.session = session
        self.resolvers: list[InMemoryResourceResolver] = []
        for path, content in (contents or {}).items():
            self.put(path, content)

    def put(self, path: str, content: bytes | str) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._contents[_file_path(path)] = data

    def get_service_resource_resolver(self) -> InMemoryResourceResolver:
        resolver = InMemoryResourceResolver(self._contents, session=self.session)
        self.resolvers.append(resolver)
        return resolver


class FilesystemResourceResolver:
    def __init__(self, root: Path, session: Any = None):
        self.root = root
        self.session = session

    def get_resource(self, path: str) -> bytes | None:
        target = (self.root / _file_path(path).lstrip("/")).resolve()
        if self.root not in target.parents and target != self.root:
            logger.warning("Rejecting repository path outside of %s: %s", self.root, path)
            return None
        if not target.is_file():
            return None
        return target.read_bytes()

    def close(self) -> None:
        return None


class FilesystemRepository:
    """Maps repository paths onto files below a root directory."""

    def __init__(self, root: str | Path, session: Any = None):
        self.root = Path(root).resolve()
        self.session = session

    def get_service_resource_resolver(self) -> FilesystemResourceResolver:
        if not self.root.is_dir():
            raise SetupError(f"Repository root {self.root} is not a directory")
        return FilesystemResourceResolver(self.root, session=self.session)


__all__ = [
    "JCR_CONTENT",
    "FilesystemRepository",
    "FilesystemResourceResolver",
    "InMemoryRepository",
    "InMemoryResourceResolver",
    "ResourceResolver",
    "ResourceResolverFactory",
]
