import re
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

REQUIRED_TEXT_FIELDS = ("name", "description", "project_manager")
DATE_FIELDS = ("start_date", "end_date")

NUMERIC = re.compile(r"^\s*[+-]?\d+(\.\d*)?\s*$")


def parse_schedule_date(value: Any) -> Any:
    """
    Accept ISO-8601 strings and date/datetime objects; plain YYYY-MM-DD means midnight UTC.

    Numbers and numeric strings are rejected rather than read as Unix timestamps.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError("must be a date string")
    if NUMERIC.match(value):
        raise ValueError("must be a date string, not a number")
    if len(value) == 10:
        try:
            return datetime.combine(date.fromisoformat(value), time.min, tzinfo=timezone.utc)
        except ValueError:
            return value
    return value


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted to it."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def check_schedule(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError("End date cannot be before start date")


class CamelModel(BaseModel):
    # JSON uses camelCase (startDate, projectManager, isFavorite)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectBase(CamelModel):
    name: str = Field(..., examples=["Project A"])
    description: str = Field(..., examples=["Goals, objectives, and implementation approach"])
    start_date: datetime = Field(..., examples=["2024-01-01"])
    end_date: datetime = Field(..., examples=["2024-02-01"])
    project_manager: str = Field(..., examples=["John Doe"])
    is_favorite: bool = Field(False, examples=[True])

    @field_serializer(*DATE_FIELDS, when_used="json")
    def _serialize_dates(self, value: datetime) -> str:
        # Millisecond precision with a Z suffix, e.g. 2024-01-01T00:00:00.000Z
        return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ProjectCreate(ProjectBase):
    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_schedule_date(value)

    @field_validator(*DATE_FIELDS)
    @classmethod
    def _normalize_dates(cls, value):
        return to_utc(value)

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _end_after_start(self):
        check_schedule(self.start_date, self.end_date)
        return self


class ProjectUpdate(CamelModel):
    """Partial update: only fields present in the request body are applied."""

    name: Optional[str] = Field(None, examples=["Updated Project Name"])
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    project_manager: Optional[str] = None
    is_favorite: Optional[bool] = None

    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_schedule_date(value)

    @field_validator(*DATE_FIELDS)
    @classmethod
    def _normalize_dates(cls, value):
        return to_utc(value)

    @field_validator("name", "description", "start_date", "end_date", "project_manager", "is_favorite")
    @classmethod
    def _not_null(cls, value):
        # Validators only run for fields that were sent, so None here is an explicit null
        if value is None:
            raise ValueError("must not be null")
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _end_after_start(self):
        check_schedule(self.start_date, self.end_date)
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Project(ProjectBase):
    id: int = Field(..., examples=[1])
