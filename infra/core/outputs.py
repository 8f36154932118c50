"""
Named stack outputs.

Output values are literals, Refs, Templates or sequences of those; they are
resolved after the graph is applied.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from infra.core.exceptions import DuplicateOutput, MissingOutput


@dataclass(frozen=True)
class OutputEntry:
    """One exported value."""
    key: str
    value: Any
    description: str


class OutputTable:
    """Ordered table of outputs with unique keys."""

    def __init__(self) -> None:
        self._entries: dict[str, OutputEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[OutputEntry]:
        return iter(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> OutputEntry:
        return self._entries[key]

    def keys(self) -> list[str]:
        return list(self._entries)

    def add(self, key: str, value: Any, description: str) -> OutputEntry:
        """
        Register an output.

        Raises:
            DuplicateOutput: key already registered
            MissingOutput: value is None
        """
        if key in self._entries:
            raise DuplicateOutput(key)
        if value is None:
            raise MissingOutput([key])
        entry = OutputEntry(key=key, value=value, description=description)
        self._entries[key] = entry
        return entry

    def require(self, keys: Iterable[str]) -> None:
        """
        Check that every key a consumer relies on was produced.

        Raises:
            MissingOutput: one or more keys absent
        """
        missing = [key for key in keys if key not in self._entries]
        if missing:
            raise MissingOutput(missing)
