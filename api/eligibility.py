from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import EligibilitySubmission
from schemas.eligibility import EligibilityCreate, EligibilityReject
from services import eligibility

router = APIRouter(prefix="/api/eligibility", tags=["eligibility"])


def _submission_to_response(s: EligibilitySubmission) -> dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "email": s.email,
        "personalEmail": s.personal_email,
        "loanId": s.loan_id,
        "employmentType": s.employment_type,
        "netMonthlyIncome": s.net_monthly_income,
        "pancard": s.pancard,
        "dob": s.dob.isoformat() if s.dob else None,
        "gender": s.gender,
        "companyName": s.company_name,
        "nextSalaryDate": s.next_salary_date.isoformat() if s.next_salary_date else None,
        "pinCode": s.pin_code,
        "state": s.state,
        "city": s.city,
        "status": s.status,
        "rejectionReason": s.rejection_reason,
        "createdAt": s.created_at.isoformat() if s.created_at else None,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }


@router.post("", response_model=dict, status_code=201)
async def submit_eligibility(body: EligibilityCreate, db: AsyncSession = Depends(get_db)):
    return _submission_to_response(await eligibility.create_submission(db, body))


@router.get("", response_model=list[dict])
async def list_eligibility(status: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    return [_submission_to_response(s) for s in await eligibility.list_submissions(db, status)]


@router.get("/{submission_id}", response_model=dict)
async def get_eligibility(submission_id: str, db: AsyncSession = Depends(get_db)):
    return _submission_to_response(await eligibility.get_submission(db, submission_id))


@router.put("/{submission_id}/approve", response_model=dict)
async def approve_eligibility(submission_id: str, db: AsyncSession = Depends(get_db)):
    return _submission_to_response(await eligibility.approve_submission(db, submission_id))


@router.put("/{submission_id}/reject", response_model=dict)
async def reject_eligibility(submission_id: str, body: EligibilityReject, db: AsyncSession = Depends(get_db)):
    return _submission_to_response(await eligibility.reject_submission(db, submission_id, body.rejection_reason))
