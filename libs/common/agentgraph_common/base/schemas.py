"""Pydantic building blocks shared by request and payload models."""

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RESOURCE_ID_PATTERN = r"^[a-zA-Z0-9\-_.]+$"

ResourceId = Annotated[str, Field(min_length=1, max_length=255, pattern=RESOURCE_ID_PATTERN)]


class CamelModel(BaseModel):
    """Model serialised with camelCase keys, accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """camelCase dict without unset optional values, as stored in JSON columns."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_optional(model: CamelModel | None) -> dict | None:
    return model.to_json_dict() if model is not None else None


M = TypeVar("M", bound=CamelModel)


def model_from_row(model_class: type[M], row: Any, **overrides: Any) -> M:
    """Build ``model_class`` from the same-named attributes of an ORM row."""
    values = {name: getattr(row, name) for name in model_class.model_fields if hasattr(row, name)}
    values.update(overrides)
    return model_class.model_validate(values)
