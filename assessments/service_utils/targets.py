"""Structured form of an assignment target.

Role assignments are persisted as ``target_type="Role"`` with
``target_value="{role}|{level_id}"``.  Code outside the persistence layer
works with :class:`TargetDescriptor` instead of the raw string.
"""
from __future__ import annotations

from dataclasses import dataclass

ROLE_KIND = "Role"
SEPARATOR = "|"


@dataclass(frozen=True)
class TargetDescriptor:
    kind: str
    role_name: str
    level_id: int

    @classmethod
    def for_role(cls, role_name: str, level_id: int) -> "TargetDescriptor":
        return cls(kind=ROLE_KIND, role_name=role_name, level_id=int(level_id))

    def encode(self) -> str:
        return f"{self.role_name}{SEPARATOR}{self.level_id}"

    @classmethod
    def decode(cls, value: str, kind: str = ROLE_KIND) -> "TargetDescriptor":
        """Parse ``"Dev|7"``; raises ``ValueError`` on malformed input."""

        role_name, sep, level = (value or "").rpartition(SEPARATOR)
        if not sep or not role_name:
            raise ValueError(f"Malformed role target: {value!r}")
        return cls(kind=kind, role_name=role_name, level_id=int(level))


def parse_role_target(value: str | None) -> TargetDescriptor | None:
    try:
        return TargetDescriptor.decode(value or "")
    except ValueError:
        return None
