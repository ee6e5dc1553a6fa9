"""HTTP service for the listening-insights pipeline."""
