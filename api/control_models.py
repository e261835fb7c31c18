"""Pydantic models for list controls, index patterns and filters."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config import DEFAULT_OPTIONS_SIZE
from errors import FieldLookupError

Scalar = Union[str, int, float, bool]


# -- Field descriptors -------------------------------------------------


class NamedField(BaseModel):
    kind: Literal["named"] = "named"
    name: str
    type: str
    aggregatable: bool = True

    @property
    def scripted(self) -> bool:
        return False


class ScriptedField(BaseModel):
    kind: Literal["scripted"] = "scripted"
    name: str
    type: str
    script: str = Field(..., min_length=1)
    lang: str = Field(..., min_length=1)
    aggregatable: bool = True

    @property
    def scripted(self) -> bool:
        return True

    @property
    def value_type(self) -> str:
        return "float" if self.type == "number" else self.type


FieldDescriptor = Annotated[
    Union[NamedField, ScriptedField], Field(discriminator="kind")
]


class IndexPattern(BaseModel):
    id: str
    title: str
    time_field_name: Optional[str] = None
    fields: list[FieldDescriptor] = Field(default_factory=list)

    @property
    def by_name(self) -> dict[str, NamedField | ScriptedField]:
        return {f.name: f for f in self.fields}

    def get_field(self, name: str) -> NamedField | ScriptedField:
        try:
            return self.by_name[name]
        except KeyError:
            raise FieldLookupError(name, self.title) from None


# -- Control parameters ------------------------------------------------


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class ListControlOptions(BaseModel):
    size: Optional[int] = Field(default=DEFAULT_OPTIONS_SIZE, examples=[5, 10])
    dynamic_options: bool = Field(
        default=True,
        description="Search terms as the user types. Only honoured for string fields.",
    )
    multiselect: bool = True


class ControlParams(BaseModel):
    id: str = Field(..., min_length=1)
    field_name: str = Field(..., min_length=1)
    index_pattern: str = Field(..., min_length=1, description="Index pattern (data view) id")
    label: str = ""
    type: Literal["list"] = "list"
    options: ListControlOptions = Field(default_factory=ListControlOptions)


class TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from", examples=["now-15m"])
    to: str = Field(default="now")


# -- Filters -----------------------------------------------------------


class FilterMeta(BaseModel):
    index: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    controlled_by: Optional[str] = None
    alias: Optional[str] = None
    negate: bool = False
    disabled: bool = False


class Filter(BaseModel):
    id: str
    meta: FilterMeta = Field(default_factory=FilterMeta)
    query: dict[str, Any]


# -- Control state -----------------------------------------------------


class ControlState(BaseModel):
    """Result of one options load: what the control should show."""

    model_config = ConfigDict(frozen=True)

    options: tuple[Scalar, ...] = ()
    enabled: bool
    disabled_reason: str = ""

    @model_validator(mode="after")
    def _reason_matches_enabled(self) -> "ControlState":
        if not self.enabled and not self.disabled_reason:
            raise ValueError("a disabled control needs a reason")
        if self.enabled and self.disabled_reason:
            raise ValueError("an enabled control cannot carry a disabled reason")
        return self
