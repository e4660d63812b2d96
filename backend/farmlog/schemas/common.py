"""Common schema building blocks.

Entities use snake_case attributes and camelCase aliases: the HTTP API and
export documents speak camelCase, Python code speaks snake_case, and input
is accepted in either spelling.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from farmlog.utils.dates import to_date


def _coerce_date(value: Any) -> Any:
    # Accept full ISO timestamps ("2024-03-01T00:00:00.000Z") for date fields
    if isinstance(value, (str, datetime)):
        return to_date(value)
    return value


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


CalendarDate = Annotated[date, BeforeValidator(_coerce_date)]
UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeleteResult(CamelModel):
    deleted: bool
    cascaded: int = 0
