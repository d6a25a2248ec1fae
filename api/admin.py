from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.dashboard import dashboard_stats
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=dict)
async def get_dashboard(db: AsyncSession = Depends(get_db)):
    return dict_keys_to_camel(await dashboard_stats(db))
