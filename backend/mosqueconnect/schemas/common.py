from pydantic import BaseModel, Field, AfterValidator, model_validator
from typing import Optional, List, Annotated, ClassVar, FrozenSet
from datetime import datetime, timezone


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store all timestamps as naive UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class PaginationInfo(BaseModel):
    """Pagination block returned by every list endpoint"""
    current: int
    total: int  # number of pages
    count: int  # items on this page
    limit: int
    total_items: int = Field(..., serialization_alias="totalItems")


class MessageResponse(BaseModel):
    message: str


class ReviewRequest(BaseModel):
    """Body for status-review PATCH endpoints"""
    status: str
    notes: Optional[str] = Field(None, max_length=1000)


class CountByKey(BaseModel):
    key: str
    count: int


def clean_strings(values: Optional[List[str]]) -> List[str]:
    return [v.strip() for v in values or [] if v and v.strip()]


class PartialUpdate(BaseModel):
    """PUT body: omitted fields are left alone, an explicit null only clears CLEARABLE fields"""

    CLEARABLE: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        nulls = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.CLEARABLE
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self
