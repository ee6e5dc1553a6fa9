"""Listening-history ingestion and aggregation pipeline."""
