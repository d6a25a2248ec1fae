from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import FormField
from schemas.form_field import FormFieldCreate, FormFieldUpdate, FormSection, FormValuesIn
from services import field_registry
from services.form_renderer import render_form, validate_values

router = APIRouter(prefix="/api/form-fields", tags=["form-fields"])


def _field_to_response(f: FormField) -> dict[str, Any]:
    return {
        "id": f.id,
        "scopeId": f.scope_id,
        "section": f.section,
        "name": f.name,
        "label": f.label,
        "type": f.type,
        "required": f.required,
        "placeholder": f.placeholder,
        "options": list(f.options or []),
        "order": f.order,
        "width": f.width,
        "createdAt": f.created_at.isoformat() if f.created_at else None,
        "updatedAt": f.updated_at.isoformat() if f.updated_at else None,
    }


@router.get("/{scope_id}", response_model=list[dict])
async def list_form_fields(
    scope_id: str,
    section: Optional[FormSection] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    fields = await field_registry.list_fields(db, scope_id, section)
    return [_field_to_response(f) for f in fields]


@router.post("", response_model=dict, status_code=201)
async def create_form_field(body: FormFieldCreate, db: AsyncSession = Depends(get_db)):
    field = await field_registry.create_field(db, body)
    return _field_to_response(field)


@router.put("/{field_id}", response_model=dict)
async def update_form_field(field_id: str, body: FormFieldUpdate, db: AsyncSession = Depends(get_db)):
    field = await field_registry.update_field(db, field_id, body)
    return _field_to_response(field)


@router.delete("/{field_id}", status_code=204)
async def delete_form_field(field_id: str, db: AsyncSession = Depends(get_db)):
    await field_registry.delete_field(db, field_id)


@router.get("/{scope_id}/render", response_model=dict)
async def render_scope_form(
    scope_id: str,
    preview: bool = Query(False, description="Disabled controls, no values"),
    db: AsyncSession = Depends(get_db),
):
    """Widget layout for a scope. Preview and live share one layout."""
    fields = await field_registry.list_fields(db, scope_id)
    return render_form(fields, preview=preview).model_dump(by_alias=True, mode="json")


@router.post("/{scope_id}/validate", response_model=dict)
async def validate_scope_values(scope_id: str, body: FormValuesIn, db: AsyncSession = Depends(get_db)):
    fields = await field_registry.list_fields(db, scope_id)
    return validate_values(fields, body.values).model_dump(by_alias=True, mode="json")
