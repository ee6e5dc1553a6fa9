"""Upload session endpoints."""
