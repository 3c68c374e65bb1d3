"""Workflow plan cached by the last build."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PlanEntry:
    """One target of the workflow plan and the command that builds it."""

    target: str
    command: str
    desc: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = {"target": self.target, "command": self.command}
        if self.desc:
            out["desc"] = self.desc
        return out


@dataclass
class Plan:
    """Ordered list of plan entries. The empty plan has no entries."""

    entries: list[PlanEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PlanEntry]:
        return iter(self.entries)

    def __getitem__(self, target: str) -> PlanEntry:
        for entry in self.entries:
            if entry.target == target:
                return entry
        raise KeyError(target)

    @property
    def targets(self) -> list[str]:
        return [entry.target for entry in self.entries]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]] | Mapping[str, str]) -> "Plan":
        """Build a plan from ``[{target, command}, ...]`` or ``{target: command}``."""
        if isinstance(records, Mapping):
            return cls([PlanEntry(target=t, command=c) for t, c in records.items()])
        return cls([
            PlanEntry(
                target=record["target"],
                command=record["command"],
                desc=record.get("desc"),
            )
            for record in records
        ])

    def to_records(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]
