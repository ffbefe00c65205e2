# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Health check tag collection."""

from collections.abc import Iterable, Iterator


class TagSet:
    """Ordered, deduplicated tag collection used to normalize `hc.tags`."""

    def __init__(self, tags: Iterable[str] = ()):
        self._tags: list[str] = []
        self._seen: set[str] = set()
        self.update(tags)

    def add(self, tag: str) -> bool:
        if tag not in self._seen:
            self._seen.add(tag)
            self._tags.append(tag)
            return True
        return False

    def update(self, tags: Iterable[str]) -> int:
        return sum(1 for tag in tags if self.add(tag))

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"TagSet({self._tags!r})"
