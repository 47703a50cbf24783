"""Replay Store — CRUD and filtered listing with optimistic concurrency.

Invariants:
    - get/delete with id < 1 raise RecordNotFoundError without touching the database
    - update is one conditional write: WHERE id = :id AND version = :version,
      bumping version in the same statement; zero rows → EditConflictError
    - delete of an absent id raises RecordNotFoundError (repeat deletes are errors)
    - get_all's total is count(*) OVER () from the same statement as the page
    - ORDER BY is built only from allow-listed columns, with id ASC as tiebreak

Design Decisions:
    - Column-level selects: rows become detached Replay values, never ORM entities
    - Title search is PostgreSQL full-text ('simple' config); on other dialects every
      query word must appear case-insensitively in the title
    - Heroes superset is @> on PostgreSQL; json_each EXISTS per hero elsewhere
"""

import logging

from sqlalchemy import Text, and_, delete, func, insert, literal, select, true, update

from dotareplays.core.domain_types import Replay, ReplayId
from dotareplays.core.errors import EditConflictError, RecordNotFoundError
from dotareplays.core.filters import Filters, Metadata, calculate_metadata
from dotareplays.models.replay import ReplayModel
from dotareplays.services.store_base import Store

logger = logging.getLogger(__name__)

_COLUMNS = (
    ReplayModel.id,
    ReplayModel.created_at,
    ReplayModel.title,
    ReplayModel.year,
    ReplayModel.runtime,
    ReplayModel.heroes,
    ReplayModel.version,
)

_SORT_COLUMNS = {
    "id": ReplayModel.id,
    "title": ReplayModel.title,
    "year": ReplayModel.year,
    "runtime": ReplayModel.runtime,
}


def _to_replay(row) -> Replay:
    return Replay(
        id=ReplayId(row.id),
        created_at=row.created_at,
        title=row.title,
        year=row.year,
        runtime=row.runtime,
        heroes=list(row.heroes or []),
        version=row.version,
    )


class ReplayStore(Store):
    """Persistence for replays."""

    async def insert(self, replay: Replay) -> Replay:
        """Persist a new replay; fills in id, created_at and version."""
        stmt = (
            insert(ReplayModel)
            .values(
                title=replay.title,
                year=replay.year,
                runtime=replay.runtime,
                heroes=list(replay.heroes),
            )
            .returning(ReplayModel.id, ReplayModel.created_at, ReplayModel.version)
        )
        async with self.bounded("replay.insert"):
            row = (await self.db.execute(stmt)).one()
            await self.db.commit()
        replay.id = ReplayId(row.id)
        replay.created_at = row.created_at
        replay.version = row.version
        logger.info("Replay created", extra={"replay_id": replay.id})
        return replay

    async def get(self, replay_id: int) -> Replay:
        if replay_id < 1:
            raise RecordNotFoundError("replay")
        stmt = select(*_COLUMNS).where(ReplayModel.id == replay_id)
        async with self.bounded("replay.get"):
            row = (await self.db.execute(stmt)).one_or_none()
            await self.db.commit()
        if row is None:
            raise RecordNotFoundError("replay")
        return _to_replay(row)

    async def update(self, replay: Replay) -> Replay:
        """Conditional write against the version the caller last read."""
        stmt = (
            update(ReplayModel)
            .where(
                ReplayModel.id == replay.id,
                ReplayModel.version == replay.version,
            )
            .values(
                title=replay.title,
                year=replay.year,
                runtime=replay.runtime,
                heroes=list(replay.heroes),
                version=ReplayModel.version + 1,
            )
            .returning(ReplayModel.version)
            .execution_options(synchronize_session=False)
        )
        async with self.bounded("replay.update"):
            new_version = (await self.db.execute(stmt)).scalar_one_or_none()
            if new_version is None:
                raise EditConflictError("replay")
            await self.db.commit()
        replay.version = new_version
        return replay

    async def delete(self, replay_id: int) -> None:
        if replay_id < 1:
            raise RecordNotFoundError("replay")
        stmt = (
            delete(ReplayModel)
            .where(ReplayModel.id == replay_id)
            .execution_options(synchronize_session=False)
        )
        async with self.bounded("replay.delete"):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError("replay")
            await self.db.commit()
        logger.info("Replay deleted", extra={"replay_id": replay_id})

    async def get_all(
        self, title: str, heroes: list[str], filters: Filters,
    ) -> tuple[list[Replay], Metadata]:
        """One page of matching replays plus metadata over the whole match set."""
        column = _SORT_COLUMNS[filters.sort_column()]
        order = column.desc() if filters.sort_direction() == "DESC" else column.asc()
        stmt = (
            select(func.count().over().label("total_records"), *_COLUMNS)
            .where(self._title_clause(title), self._heroes_clause(heroes))
            .order_by(order, ReplayModel.id.asc())
            .limit(filters.limit())
            .offset(filters.offset())
        )
        async with self.bounded("replay.get_all"):
            rows = (await self.db.execute(stmt)).all()
            await self.db.commit()
        total_records = rows[0].total_records if rows else 0
        replays = [_to_replay(row) for row in rows]
        return replays, calculate_metadata(total_records, filters.page, filters.page_size)

    def _title_clause(self, title: str):
        if not title.strip():
            return true()
        if self.dialect == "postgresql":
            return func.to_tsvector("simple", ReplayModel.title).bool_op("@@")(
                func.plainto_tsquery("simple", title),
            )
        return and_(*(
            func.lower(ReplayModel.title, type_=Text).contains(word.lower(), autoescape=True)
            for word in title.split()
        ))

    def _heroes_clause(self, heroes: list[str]):
        if not heroes:
            return true()
        if self.dialect == "postgresql":
            return ReplayModel.heroes.contains(list(heroes))
        clauses = []
        for hero in heroes:
            each = func.json_each(ReplayModel.heroes).table_valued("value")
            clauses.append(
                select(literal(1)).select_from(each).where(each.c.value == hero).exists(),
            )
        return and_(*clauses)
