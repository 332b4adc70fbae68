"""
FuelEU Compliance Ledger - Compliance Balance API Router
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.balance_service import BalanceService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


class ComplianceBalanceResponse(BaseModel):
    """Compliance balance in gCO2eq. Positive is surplus, negative is deficit."""
    ship_id: str
    year: int
    cb: float
    cb_before: Optional[float] = None
    applied: Optional[float] = None


@router.get("/cb", response_model=ComplianceBalanceResponse)
async def get_compliance_balance(
    ship_id: str = Query(..., min_length=1),
    year: int = Query(...),
    db: Session = Depends(get_db),
):
    """Recompute the ship's CB from its route data and store it."""
    try:
        result = BalanceService(db).compute_balance(ship_id, year)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to calculate compliance balance: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate compliance balance")

    return ComplianceBalanceResponse(**result)


@router.get("/adjusted-cb", response_model=ComplianceBalanceResponse)
async def get_adjusted_balance(
    ship_id: str = Query(..., min_length=1),
    year: int = Query(...),
    db: Session = Depends(get_db),
):
    """Stored CB plus everything banked for the same ship and year."""
    try:
        result = BalanceService(db).adjusted_balance(ship_id, year)
    except Exception as e:
        logger.error(f"Failed to fetch adjusted CB: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch adjusted CB")

    return ComplianceBalanceResponse(**result)
