"""Shared pydantic base for engine value objects."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """Immutable value object; accepts snake_case or camelCase keys, dumps camelCase payloads."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> dict:
        """JSON-ready dict in the camelCase shape callers exchange."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
