from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import ApplicationDocument, LoanApplication
from schemas.application import (
    ApplicationCreate,
    ApplicationReject,
    ApplicationStatusUpdate,
    DocumentAttachmentIn,
    DocumentReject,
)
from services import applications, documents
from services.assembler import assemble_application
from services.form_renderer import display_value
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _document_to_response(d: ApplicationDocument) -> dict[str, Any]:
    return {
        "id": d.id,
        "applicationId": d.application_id,
        "position": d.position,
        "type": d.type,
        "name": d.name,
        "url": d.url,
        "status": d.status,
        "remarks": d.remarks,
        "createdAt": d.created_at.isoformat() if d.created_at else None,
        "updatedAt": d.updated_at.isoformat() if d.updated_at else None,
    }


def _app_to_response(app: LoanApplication, *, with_display: bool = False) -> dict[str, Any]:
    """Serialize application to dict with camelCase for frontend. Dynamic field names are kept as-is."""
    out = {
        "id": app.id,
        "applicationNumber": app.application_number,
        "userId": app.user_id,
        "loanId": app.loan_id,
        "status": app.status,
        "personalInfo": dict_keys_to_camel(app.personal_info or {}),
        "address": dict_keys_to_camel(app.address or {}),
        "employmentInfo": dict_keys_to_camel(app.employment_info or {}),
        "loanDetails": dict_keys_to_camel(app.loan_details or {}),
        "documents": [_document_to_response(d) for d in app.documents],
        "dynamicFields": dict(app.dynamic_fields or {}),
        "rejectionReason": app.rejection_reason,
        "reviewedAt": app.reviewed_at.isoformat() if app.reviewed_at else None,
        "createdAt": app.created_at.isoformat() if app.created_at else None,
        "updatedAt": app.updated_at.isoformat() if app.updated_at else None,
    }
    if with_display:
        out["dynamicFieldsDisplay"] = {k: display_value(v) for k, v in (app.dynamic_fields or {}).items()}
    return out


@router.get("", response_model=list[dict])
async def list_applications(
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    loan_id: Optional[str] = Query(None, alias="loanId"),
    db: AsyncSession = Depends(get_db),
):
    apps = await applications.list_applications(db, status=status, user_id=user_id, loan_id=loan_id)
    return [_app_to_response(a) for a in apps]


@router.get("/{application_id}", response_model=dict)
async def get_application(application_id: str, db: AsyncSession = Depends(get_db)):
    app = await applications.get_application(db, application_id)
    return _app_to_response(app, with_display=True)


@router.post("", response_model=dict, status_code=201)
async def create_application(body: ApplicationCreate, db: AsyncSession = Depends(get_db)):
    app = await assemble_application(db, body)
    return _app_to_response(app)


@router.put("/{application_id}/approve", response_model=dict)
async def approve_application(application_id: str, db: AsyncSession = Depends(get_db)):
    app = await applications.approve_application(db, application_id)
    return _app_to_response(app)


@router.put("/{application_id}/reject", response_model=dict)
async def reject_application(application_id: str, body: ApplicationReject, db: AsyncSession = Depends(get_db)):
    app = await applications.reject_application(db, application_id, body.rejection_reason)
    return _app_to_response(app)


@router.put("/{application_id}/status", response_model=dict)
async def move_application(
    application_id: str, body: ApplicationStatusUpdate, db: AsyncSession = Depends(get_db)
):
    app = await applications.move_application(db, application_id, body.status)
    return _app_to_response(app)


@router.get("/{application_id}/documents", response_model=list[dict])
async def list_documents(application_id: str, db: AsyncSession = Depends(get_db)):
    return [_document_to_response(d) for d in await documents.list_documents(db, application_id)]


@router.post("/{application_id}/documents", response_model=dict, status_code=201)
async def attach_document(application_id: str, body: DocumentAttachmentIn, db: AsyncSession = Depends(get_db)):
    return _document_to_response(await documents.attach_document(db, application_id, body))


@router.put("/{application_id}/documents/{document_id}/verify", response_model=dict)
async def verify_document(application_id: str, document_id: str, db: AsyncSession = Depends(get_db)):
    return _document_to_response(await documents.verify_document(db, application_id, document_id))


@router.put("/{application_id}/documents/{document_id}/reject", response_model=dict)
async def reject_document(
    application_id: str, document_id: str, body: DocumentReject, db: AsyncSession = Depends(get_db)
):
    return _document_to_response(await documents.reject_document(db, application_id, document_id, body.remarks))
