from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, Field, computed_field
from pydantic.alias_generators import to_camel

FieldType = Literal["Text", "Number", "Email", "Phone", "Date", "Textarea", "Select", "Checkbox", "Radio", "File"]
FormSection = Literal["employment", "loanDetails", "documents"]
FieldWidth = Literal["full", "half", "third"]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)
# Render order of the fixed sections
SECTIONS: tuple[str, ...] = get_args(FormSection)
SECTION_TITLES = {
    "employment": "Employment / Source of Income",
    "loanDetails": "Loan Details",
    "documents": "Documents",
}
CHOICE_TYPES = frozenset({"Select", "Radio"})


class FieldDefinitionBase(BaseModel):
    """Shape shared by persisted fields and pending drafts."""
    section: FormSection = "employment"
    label: str = ""
    name: Optional[str] = Field(None, description="Machine key; derived from label when omitted")
    type: FieldType = "Text"
    required: bool = False
    placeholder: Optional[str] = None
    options: list[str] = Field(default_factory=list)
    order: Optional[int] = Field(None, description="Render position within the section")
    width: FieldWidth = "full"

    model_config = {"populate_by_name": True}


class FormFieldCreate(FieldDefinitionBase):
    scope_id: str = Field(..., alias="scopeId", min_length=1)


class FormFieldUpdate(BaseModel):
    section: Optional[FormSection] = None
    label: Optional[str] = None
    name: Optional[str] = None
    type: Optional[FieldType] = None
    required: Optional[bool] = None
    placeholder: Optional[str] = None
    options: Optional[list[str]] = None
    order: Optional[int] = None
    width: Optional[FieldWidth] = None

    model_config = {"populate_by_name": True}


class PendingFieldDraft(FieldDefinitionBase):
    """A field authored before its owning loan product exists. Session memory only."""
    temp_id: str = Field(..., alias="tempId")


class FormFieldResponse(BaseModel):
    id: str
    scope_id: str
    section: FormSection
    name: str
    label: str
    type: FieldType
    required: bool
    placeholder: Optional[str] = None
    options: list[str] = Field(default_factory=list)
    order: int
    width: FieldWidth
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


# --- Renderer output ---


class _CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class Widget(_CamelModel):
    name: str
    label: str
    field_type: FieldType
    control: Literal["input", "textarea", "select", "radio", "checkbox", "file"]
    input_type: Optional[str] = None
    input_mode: Optional[str] = None
    required: bool
    placeholder: Optional[str] = None
    options: list[str] = Field(default_factory=list)
    multiple: bool = False
    width: FieldWidth = "full"
    value: Any = None
    disabled: bool = False
    position: int


class RenderedSection(_CamelModel):
    section: FormSection
    title: str
    widgets: list[Widget] = Field(default_factory=list)


class FormValidity(_CamelModel):
    missing: list[str] = Field(default_factory=list)
    invalid: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.missing and not self.invalid


class RenderedForm(_CamelModel):
    preview: bool
    sections: list[RenderedSection] = Field(default_factory=list)
    validity: FormValidity = Field(default_factory=FormValidity)

    def field_order(self) -> list[tuple[str, str]]:
        """(name, type) pairs in render order, across sections."""
        return [(w.name, w.field_type) for s in self.sections for w in s.widgets]


class FormValuesIn(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)
