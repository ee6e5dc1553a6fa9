"""Aggregation engine, query catalog, and insights document models."""

from insights_core.aggregation.catalog import CATALOG_VERSION, QUERY_CATALOG, RankingQuery
from insights_core.aggregation.engine import AggregationEngine
from insights_core.aggregation.schemas import BasicInsights, EnrichmentPayload, InsightsDocument

__all__ = [
    "CATALOG_VERSION",
    "QUERY_CATALOG",
    "AggregationEngine",
    "BasicInsights",
    "EnrichmentPayload",
    "InsightsDocument",
    "RankingQuery",
]
