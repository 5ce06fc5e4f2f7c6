"""Shared Pydantic configuration for request bodies."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Request body accepting camelCase (dashboard) or snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
