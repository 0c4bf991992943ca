from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Decision(str, Enum):
    RETAIN = "retain"
    EXPIRE = "expire"


@dataclass(frozen=True)
class Identity:
    instance_id: str
    region: str


@dataclass(frozen=True)
class Volume:
    volume_id: str
    name: str | None
    device: str | None
    instance_id: str | None


@dataclass(frozen=True)
class Backup:
    snapshot_id: str
    volume_id: str
    start_time: datetime | None
    description: str = ""
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.tags.get("Name")


@dataclass
class VolumeOutcome:
    volume_id: str
    snapshot_id: str | None = None
    retained: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class RunSummary:
    instance_id: str
    region: str
    cutoff: datetime
    outcomes: list[VolumeOutcome] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return sum(len(outcome.failures) for outcome in self.outcomes)

    @property
    def snapshots_created(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.snapshot_id)

    @property
    def snapshots_deleted(self) -> int:
        return sum(len(outcome.deleted) for outcome in self.outcomes)

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "region": self.region,
            "cutoff": self.cutoff.isoformat(),
            "snapshots_created": self.snapshots_created,
            "snapshots_deleted": self.snapshots_deleted,
            "failures": self.failure_count,
            "volumes": [
                {
                    "volume_id": outcome.volume_id,
                    "snapshot_id": outcome.snapshot_id,
                    "retained": list(outcome.retained),
                    "deleted": list(outcome.deleted),
                    "failures": list(outcome.failures),
                }
                for outcome in self.outcomes
            ],
        }
