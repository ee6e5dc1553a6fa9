"""Process-wide resources shared by the API routers."""

import functools
from typing import Annotated

from fastapi import Depends

from insights_api.pipeline import InsightsPipeline
from insights_api.settings import get_settings
from insights_core.db.session import DatabaseManager

db_manager = DatabaseManager.from_env()


@functools.lru_cache(maxsize=1)
def get_pipeline() -> InsightsPipeline:
    """Return the pipeline singleton wired against ``db_manager``.

    Cached so the workspace locks and the Spotify token slot are shared by
    every request in the process.
    """
    return InsightsPipeline.from_settings(get_settings(), db_manager)


Pipeline = Annotated[InsightsPipeline, Depends(get_pipeline)]
