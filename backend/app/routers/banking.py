"""
FuelEU Compliance Ledger - Banking API Router

Bank surplus CB and apply it later. Entries are append-only.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.db_models import BankEntryDB
from ..services.banking_service import BankingService
from ..services.errors import ComplianceServiceError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/banking", tags=["banking"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class BankingRequest(BaseModel):
    """Bank or apply an amount of CB."""
    ship_id: str = Field(..., min_length=1, description="Ship identifier")
    year: int = Field(..., description="Compliance year")
    amount: float = Field(..., description="Amount in gCO2eq, must be positive")


class BankEntryResponse(BaseModel):
    id: int
    ship_id: str
    year: int
    amount_gco2eq: float
    created_at: str


class BankingResult(BaseModel):
    success: bool
    entry: BankEntryResponse


def _entry_response(entry: BankEntryDB) -> BankEntryResponse:
    return BankEntryResponse(
        id=entry.id,
        ship_id=entry.ship_id,
        year=entry.year,
        amount_gco2eq=entry.amount_gco2eq,
        created_at=entry.created_at.isoformat(),
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("/records", response_model=List[BankEntryResponse])
async def get_banking_records(
    ship_id: str = Query(..., min_length=1),
    year: int = Query(...),
    db: Session = Depends(get_db),
):
    """Bank ledger for a ship and year, newest first."""
    try:
        records = BankingService(db).get_records(ship_id, year)
    except Exception as e:
        logger.error(f"Failed to fetch banking records: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch banking records")

    return [_entry_response(r) for r in records]


@router.post("/bank", response_model=BankingResult)
async def bank_surplus(request: BankingRequest, db: Session = Depends(get_db)):
    """Bank part of a positive compliance balance."""
    try:
        entry = BankingService(db).bank_surplus(request.ship_id, request.year, request.amount)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to bank surplus: {e}")
        raise HTTPException(status_code=500, detail="Failed to bank surplus")

    return BankingResult(success=True, entry=_entry_response(entry))


@router.post("/apply", response_model=BankingResult)
async def apply_banked_surplus(request: BankingRequest, db: Session = Depends(get_db)):
    """Apply banked surplus against the compliance balance."""
    try:
        entry = BankingService(db).apply_banked(request.ship_id, request.year, request.amount)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to apply banked surplus: {e}")
        raise HTTPException(status_code=500, detail="Failed to apply banked surplus")

    return BankingResult(success=True, entry=_entry_response(entry))
