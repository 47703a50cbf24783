"""Replay Routes — CRUD and listing, each guarded by a replays:* permission.

Invariants:
    - Reads need replays:read, writes need replays:write
    - A non-numeric or < 1 id is a 404, the same as an absent record
    - PATCH re-reads the record, overlays the body, and writes against the version
      it read; X-Expected-Version (optional) must match that version or → 409
    - Query parameters are collected into one Validator before the store is called
"""

import logging

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse

from dotareplays.api.dependencies import get_replay_store, require_permission
from dotareplays.core.domain_types import PermissionCode, Replay
from dotareplays.core.errors import EditConflictError, RecordNotFoundError
from dotareplays.core.filters import REPLAY_SORT_SAFELIST, Filters
from dotareplays.core.validation_rules import validate_filters, validate_replay
from dotareplays.core.validator import Validator
from dotareplays.schemas.replay import (
    MetadataResponse, ReplayCreate, ReplayResponse, ReplayUpdate,
)
from dotareplays.services.replay_store import ReplayStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/replays", tags=["replays"])

can_read = require_permission(PermissionCode.REPLAYS_READ)
can_write = require_permission(PermissionCode.REPLAYS_WRITE)


def _read_id(raw: str) -> int:
    try:
        replay_id = int(raw)
    except ValueError:
        raise RecordNotFoundError("replay")
    if replay_id < 1:
        raise RecordNotFoundError("replay")
    return replay_id


def _read_int(raw: str | None, default: int, key: str, v: Validator) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        v.add_error(key, "must be an integer value")
        return default


def _read_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item for item in raw.split(",") if item]


def _envelope(replay: Replay) -> dict:
    return {"replay": ReplayResponse.from_replay(replay).model_dump()}


@router.get("", dependencies=[Depends(can_read)])
async def list_replays(
    title: str = Query(""),
    heroes: str | None = Query(None),
    page: str | None = Query(None),
    page_size: str | None = Query(None),
    sort: str = Query("id"),
    replays: ReplayStore = Depends(get_replay_store),
):
    """Filtered, sorted, paginated listing."""
    v = Validator()
    filters = Filters(
        page=_read_int(page, 1, "page", v),
        page_size=_read_int(page_size, 20, "page_size", v),
        sort=sort,
        sort_safelist=REPLAY_SORT_SAFELIST,
    )
    validate_filters(v, filters)
    v.raise_if_invalid()

    found, metadata = await replays.get_all(title, _read_csv(heroes), filters)
    return {
        "replays": [ReplayResponse.from_replay(r).model_dump() for r in found],
        "metadata": MetadataResponse.from_metadata(metadata).model_dump(),
    }


@router.post("", dependencies=[Depends(can_write)])
async def create_replay(
    body: ReplayCreate,
    replays: ReplayStore = Depends(get_replay_store),
):
    replay = Replay(
        title=body.title, year=body.year, runtime=body.runtime, heroes=body.heroes,
    )
    v = Validator()
    validate_replay(v, replay)
    v.raise_if_invalid()

    await replays.insert(replay)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=_envelope(replay),
        headers={"Location": f"/v1/replays/{replay.id}"},
    )


@router.get("/{replay_id}", dependencies=[Depends(can_read)])
async def show_replay(
    replay_id: str,
    replays: ReplayStore = Depends(get_replay_store),
):
    replay = await replays.get(_read_id(replay_id))
    return _envelope(replay)


@router.patch("/{replay_id}", dependencies=[Depends(can_write)])
async def update_replay(
    replay_id: str,
    body: ReplayUpdate,
    expected_version: str | None = Header(None, alias="X-Expected-Version"),
    replays: ReplayStore = Depends(get_replay_store),
):
    """Partial update under optimistic concurrency."""
    replay = await replays.get(_read_id(replay_id))
    if expected_version is not None and expected_version != str(replay.version):
        raise EditConflictError("replay")

    body.apply(replay)
    v = Validator()
    validate_replay(v, replay)
    v.raise_if_invalid()

    await replays.update(replay)
    return _envelope(replay)


@router.delete("/{replay_id}", dependencies=[Depends(can_write)])
async def delete_replay(
    replay_id: str,
    replays: ReplayStore = Depends(get_replay_store),
):
    await replays.delete(_read_id(replay_id))
    return {"message": "replay successfully deleted"}
