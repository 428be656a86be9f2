from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Numeric primitives ---
Money = Annotated[float, Field(ge=0)]
NonNegInt = Annotated[int, Field(ge=0)]
Rating = Annotated[float, Field(ge=0, le=5)]
Percent = Annotated[float, Field(ge=0, le=100)]


def _as_utc(value: datetime) -> datetime:
    # naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """
    Base for every stored/served record.

    Python attributes are snake_case; JSON uses the camelCase names the
    storage blobs and HTTP clients expect. Both are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
