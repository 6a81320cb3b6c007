from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Record(BaseModel):
    """A row of the content store holding post HTML."""

    model_config = ConfigDict(frozen=True)

    id: Any
    content: str = ""

    @model_validator(mode="before")
    @classmethod
    def _none_content(cls, data: Any):
        # NULL post_content columns come back as None
        if isinstance(data, dict) and data.get("content") is None:
            data = {**data, "content": ""}
        return data


class ResourceOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference: str
    succeeded: bool
    new_location: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _location_matches_status(self):
        if self.succeeded and not self.new_location:
            raise ValueError("a succeeded outcome needs a new_location")
        if not self.succeeded and self.new_location is not None:
            raise ValueError("a failed outcome cannot carry a new_location")
        return self

    @classmethod
    def success(cls, reference: str, new_location: str) -> "ResourceOutcome":
        return cls(reference=reference, succeeded=True, new_location=new_location)

    @classmethod
    def failure(cls, reference: str, error: Optional[BaseException] = None) -> "ResourceOutcome":
        return cls(reference=reference, succeeded=False, error=str(error) if error is not None else None)


class RecordStats(BaseModel):
    found: int = 0
    processed: int = 0
    failed: int = 0

    def record(self, outcome: ResourceOutcome) -> None:
        self.found += 1
        if outcome.succeeded:
            self.processed += 1
        else:
            self.failed += 1


class RecordState(str, Enum):
    NO_RESOURCES = "no_resources"
    PERSISTED = "persisted"
    DEGRADED = "degraded"


class RecordResult(BaseModel):
    """Terminal state of one record, handed back to the coordinator."""

    record_id: Any
    state: RecordState
    stats: RecordStats = Field(default_factory=RecordStats)
    updates: Dict[str, str] = Field(default_factory=dict)


class GlobalStats(BaseModel):
    found: int = 0
    processed: int = 0
    failed: int = 0
    records: int = 0
    persisted: int = 0
    degraded: int = 0
    no_resources: int = 0

    def add(self, result: RecordResult) -> None:
        self.found += result.stats.found
        self.processed += result.stats.processed
        self.failed += result.stats.failed
        self.records += 1
        if result.state is RecordState.PERSISTED:
            self.persisted += 1
        elif result.state is RecordState.DEGRADED:
            self.degraded += 1
        else:
            self.no_resources += 1
