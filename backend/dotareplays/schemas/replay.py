"""Replay Schemas — create / partial-update bodies and the public replay view.

Invariants:
    - version and created_at are never accepted from a client
    - ReplayUpdate fields are all optional; None means "leave unchanged"
"""

import re

from pydantic import BaseModel, ConfigDict, field_validator

from dotareplays.core.domain_types import Replay
from dotareplays.core.filters import Metadata

RUNTIME_RX = re.compile(r"^(\d+) mins$")


def parse_runtime(value):
    """Accept an integer or the "<n> mins" form used in responses."""
    if isinstance(value, str):
        match = RUNTIME_RX.match(value)
        if match is None:
            raise ValueError("invalid runtime format")
        return int(match.group(1))
    return value


class ReplayCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = ""
    year: int = 0
    runtime: int = 0
    heroes: list[str] | None = None

    @field_validator("runtime", mode="before")
    @classmethod
    def runtime_from_text(cls, v):
        return parse_runtime(v)


class ReplayUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    year: int | None = None
    runtime: int | None = None
    heroes: list[str] | None = None

    @field_validator("runtime", mode="before")
    @classmethod
    def runtime_from_text(cls, v):
        return parse_runtime(v)

    def apply(self, replay: Replay) -> Replay:
        """Overlay provided fields onto a replay read from the store."""
        for name, value in self.model_dump(exclude_none=True).items():
            setattr(replay, name, value)
        return replay


class ReplayResponse(BaseModel):
    id: int
    title: str
    year: int
    runtime: str
    heroes: list[str]
    version: int

    @classmethod
    def from_replay(cls, replay: Replay) -> "ReplayResponse":
        return cls(
            id=replay.id,
            title=replay.title,
            year=replay.year,
            runtime=f"{replay.runtime} mins",
            heroes=replay.heroes,
            version=replay.version,
        )


class MetadataResponse(BaseModel):
    current_page: int
    page_size: int
    first_page: int
    last_page: int
    total_records: int

    @classmethod
    def from_metadata(cls, metadata: Metadata) -> "MetadataResponse":
        return cls(
            current_page=metadata.current_page,
            page_size=metadata.page_size,
            first_page=metadata.first_page,
            last_page=metadata.last_page,
            total_records=metadata.total_records,
        )
