"""Response models for the session endpoints."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from insights_core.aggregation.schemas import InsightsDocument


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionResponse(_CamelModel):
    message: str
    workspace_key: str


class UploadResponse(_CamelModel):
    message: str
    records_ingested: int


class FinishSessionResponse(_CamelModel):
    message: str
    insights: InsightsDocument
