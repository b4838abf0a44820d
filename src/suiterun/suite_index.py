"""
Suite index: fixed-bucket hash table of suite records.

Maps a suite name to its setup/teardown hooks. Buckets are chains of
suites; a suite is prepended to the chain of its bucket and the table never
resizes, since suite counts are defined by the program, not by user input.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

DEFAULT_BUCKET_COUNT = 1024

FNV1A_OFFSET_BASIS = 2166136261
FNV1A_PRIME = 16777619

FixtureHook = Callable[[Any], None]


def fnv1a32(data: bytes) -> int:
    """
    32-bit FNV-1a hash.

    Example:
        >>> hex(fnv1a32(b"a"))
        '0xe40c292c'
    """
    h = FNV1A_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV1A_PRIME) & 0xFFFFFFFF
    return h


def hash_suite(name: str) -> int:
    """Hash a suite name over its UTF-8 bytes."""
    return fnv1a32(name.encode("utf-8"))


@dataclass(eq=False)
class Suite:
    """Setup/teardown binding for a family of tests sharing a name."""

    name: str
    setup: FixtureHook | None = None
    teardown: FixtureHook | None = None


class SuiteIndex:
    """
    Hash table from suite name to Suite.

    Bucket storage is created lazily by init_once(), which every
    registration site may call; only the first call allocates.
    """

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT) -> None:
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be positive, got {bucket_count}")
        self.bucket_count = bucket_count
        self._buckets: list[list[Suite]] | None = None

    @property
    def initialized(self) -> bool:
        return self._buckets is not None

    def init_once(self) -> None:
        """Allocate the buckets unless they already exist."""
        if self._buckets is None:
            self._buckets = [[] for _ in range(self.bucket_count)]

    def bucket_for(self, name: str) -> int:
        return hash_suite(name) % self.bucket_count

    def find(self, name: str) -> Suite | None:
        """Return the suite called name, or None."""
        if self._buckets is None:
            return None
        for suite in self._buckets[self.bucket_for(name)]:
            if suite.name == name:
                return suite
        return None

    def insert(self, suite: Suite) -> None:
        """Prepend suite to its bucket chain. Does not check for duplicates."""
        self.init_once()
        self._buckets[self.bucket_for(suite.name)].insert(0, suite)

    def emplace(self, suite: Suite) -> Suite:
        """
        Find-or-create by name.

        Returns the existing suite with the same name if there is one (the
        candidate is then discarded), otherwise inserts and returns the
        candidate.
        """
        found = self.find(suite.name)
        if found is not None:
            return found
        self.insert(suite)
        return suite

    def clear(self) -> None:
        self._buckets = None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def __iter__(self) -> Iterator[Suite]:
        if self._buckets is None:
            return
        for chain in self._buckets:
            yield from chain

    def __len__(self) -> int:
        if self._buckets is None:
            return 0
        return sum(len(chain) for chain in self._buckets)
