"""
Shared pydantic base: camelCase on the wire, snake_case in Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StatusResponse(APIModel):
    status: bool = True
    message: str


class PageMeta(APIModel):
    status: bool = True
    current_page: int
    total_pages: int
    total: int
