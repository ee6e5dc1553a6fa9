"""Aggregation engine: runs the query catalog against a workspace table."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import ColumnElement, Integer, Select, Table, cast, distinct, extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from insights_core.aggregation.catalog import (
    CATALOG_VERSION,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    QUERY_CATALOG,
    Dimension,
    Metric,
    RankingQuery,
)
from insights_core.aggregation.schemas import BasicInsights, InsightsDocument
from insights_core.db.session import DatabaseManager
from insights_core.errors import AggregationError, WorkspaceProvisioningError
from insights_core.workspace import WorkspaceManager, workspace_table

logger = logging.getLogger(__name__)

_MS_SUM_LABEL = "ms_played_sum"


class InsightQueries:
    """Stateless SQL builders for catalog entries, per dialect."""

    @staticmethod
    def dimension(dim: Dimension, table: Table, dialect: str) -> ColumnElement[Any]:
        """Column expression for a grouping key."""
        if dim is Dimension.ARTIST:
            return table.c.artist_name
        if dim is Dimension.ALBUM:
            return table.c.album_name
        if dim is Dimension.TRACK:
            return table.c.track_name

        ts = table.c.ts
        if dialect == "sqlite":
            fmt = {
                Dimension.YEAR: "%Y",
                Dimension.MONTH: "%m",
                Dimension.DAY_OF_WEEK: "%w",  # 0=Sunday
                Dimension.HOUR_OF_DAY: "%H",
            }[dim]
            expr = cast(func.strftime(fmt, ts), Integer)
        else:
            field = {
                Dimension.YEAR: "year",
                Dimension.MONTH: "month",
                Dimension.DAY_OF_WEEK: "dow",  # 0=Sunday
                Dimension.HOUR_OF_DAY: "hour",
            }[dim]
            expr = cast(extract(field, ts), Integer)
        return expr

    @staticmethod
    def distinct_track_uris(table: Table, dialect: str) -> ColumnElement[Any]:
        """Distinct track URIs of a group: an array on PostgreSQL, a comma list on SQLite."""
        if dialect == "sqlite":
            return func.group_concat(distinct(table.c.spotify_track_uri))
        return func.array_agg(distinct(table.c.spotify_track_uri))

    @staticmethod
    def ranking(query: RankingQuery, table: Table, dialect: str) -> Select[Any]:
        """Build the grouped, ranked SELECT for one catalog entry."""
        dims = [InsightQueries.dimension(d, table, dialect) for d in query.dimensions]

        if query.metric is Metric.PLAYS:
            metric = func.count().label(Metric.PLAYS.value)
        else:
            metric = func.coalesce(func.sum(table.c.ms_played), 0).label(_MS_SUM_LABEL)

        columns: list[Any] = [expr.label(d.value) for d, expr in zip(query.dimensions, dims, strict=True)]
        columns.append(metric)
        if query.collect_track_uris:
            columns.append(InsightQueries.distinct_track_uris(table, dialect).label("track_uris"))

        stmt = (
            select(*columns)
            .select_from(table)
            .group_by(*dims)
            .order_by(metric.desc(), *(expr.asc() for expr in dims))
        )
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        return stmt

    @staticmethod
    def basic(table: Table) -> Select[Any]:
        """Whole-table summary: counts, mean play time, first/last play."""
        return select(
            func.count().label("total_records"),
            func.count(distinct(table.c.username)).label("unique_users"),
            func.avg(table.c.ms_played).label("avg_play_time"),
            func.coalesce(func.sum(table.c.ms_played), 0).label("total_ms_played"),
            func.min(table.c.ts).label("first_play"),
            func.max(table.c.ts).label("last_play"),
        ).select_from(table)


class AggregationEngine:
    """Builds an InsightsDocument from one workspace.

    Every result set is present in the output; a cut with no rows is an
    empty list.
    """

    def __init__(self, db: DatabaseManager, workspaces: WorkspaceManager) -> None:
        self._db = db
        self._workspaces = workspaces

    async def aggregate(self, key: str) -> InsightsDocument:
        """Run the full query catalog against workspace ``key``.

        Raises:
            AggregationError: If the workspace is missing or any query fails.
        """
        try:
            present = await self._workspaces.exists(key)
        except WorkspaceProvisioningError as exc:
            raise AggregationError(str(exc)) from exc
        if not present:
            raise AggregationError(f"Workspace {key} does not exist")

        table = workspace_table(key)
        dialect = self._db.dialect_name
        results: dict[str, Any] = {}

        try:
            async with self._db.session() as session:
                for query in QUERY_CATALOG:
                    rows = await self._run_ranking(query, table, dialect, session)
                    results[query.name] = rows
                    logger.debug("Query %s on %s returned %d rows", query.name, key, len(rows))
                results["basic_insights"] = await self._run_basic(table, session)
        except SQLAlchemyError as exc:
            raise AggregationError(f"Aggregation over {key} failed: {exc}") from exc

        logger.info(
            "Aggregated workspace %s with catalog v%d: %d records",
            key,
            CATALOG_VERSION,
            results["basic_insights"].total_records,
        )
        return InsightsDocument(**results)

    async def _run_ranking(
        self,
        query: RankingQuery,
        table: Table,
        dialect: str,
        session: AsyncSession,
    ) -> list[Any]:
        result = await session.execute(InsightQueries.ranking(query, table, dialect))
        return [query.row_model(**self._shape_row(dict(row._mapping))) for row in result.all()]

    async def _run_basic(self, table: Table, session: AsyncSession) -> BasicInsights:
        row = (await session.execute(InsightQueries.basic(table))).one()
        total_ms = int(row.total_ms_played or 0)
        return BasicInsights(
            total_records=row.total_records,
            unique_users=row.unique_users,
            avg_play_time=float(row.avg_play_time) if row.avg_play_time is not None else None,
            total_ms_played=total_ms,
            listening_hours=round(total_ms / MS_PER_HOUR, 2),
            first_play=_as_utc(row.first_play),
            last_play=_as_utc(row.last_play),
        )

    @staticmethod
    def _shape_row(raw: dict[str, Any]) -> dict[str, Any]:
        """Convert summed milliseconds to minutes and split URI aggregates.

        Weekdays come back 0=Sunday and are shifted to 1=Sunday..7=Saturday
        here rather than in SQL, so the grouped expression carries no bound
        parameter.
        """
        day = raw.get(Dimension.DAY_OF_WEEK.value)
        if day is not None:
            raw[Dimension.DAY_OF_WEEK.value] = int(day) + 1
        if _MS_SUM_LABEL in raw:
            raw[Metric.MINUTES.value] = int(raw.pop(_MS_SUM_LABEL)) / MS_PER_MINUTE
        if "track_uris" in raw:
            uris = raw["track_uris"]
            if isinstance(uris, str):
                uris = uris.split(",")
            raw["track_uris"] = sorted(u for u in (uris or []) if u)
        return raw


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; stored values are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
