"""
FuelEU Compliance Ledger - Pooling API Router (Article 21)

Pools are created atomically and never edited; they can only be deleted
as a whole. Balances sent by the client are ignored.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.db_models import PoolDB
from ..services.errors import ComplianceServiceError, PoolValidationError
from ..services.pool_service import PoolService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pools", tags=["pools"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class PoolMemberRequest(BaseModel):
    ship_id: str = Field(..., min_length=1)
    # Accepted for client compatibility; recomputed server-side
    cb_before: Optional[float] = None


class CreatePoolRequest(BaseModel):
    year: int = Field(..., description="Compliance year")
    members: List[PoolMemberRequest] = Field(..., description="Ships joining the pool")


class PoolMemberResponse(BaseModel):
    ship_id: str
    cb_before: float
    cb_after: float


class PoolCreationResponse(BaseModel):
    pool_id: int
    year: int
    members: List[PoolMemberResponse]
    total_sum: float
    valid: bool
    errors: List[str] = []


class PoolResponse(BaseModel):
    pool_id: int
    year: int
    created_at: str
    members: List[PoolMemberResponse]
    total_sum: float


class DeletePoolResponse(BaseModel):
    success: bool
    pool_id: int
    deleted: dict


def _pool_response(pool: PoolDB) -> PoolResponse:
    members = [
        PoolMemberResponse(ship_id=m.ship_id, cb_before=m.cb_before, cb_after=m.cb_after)
        for m in pool.members
    ]
    return PoolResponse(
        pool_id=pool.id,
        year=pool.year,
        created_at=pool.created_at.isoformat(),
        members=members,
        total_sum=sum(m.cb_before for m in members),
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("", response_model=PoolCreationResponse)
async def create_pool(request: CreatePoolRequest, db: Session = Depends(get_db)):
    """
    Create a pool.

    Each member's CB is re-derived from stored data, then allocated
    greedily and validated. Rejected pools return 400 with the rule
    violations in `errors`.
    """
    try:
        result = PoolService(db).create_pool(
            request.year, [m.ship_id for m in request.members]
        )
    except PoolValidationError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": str(e), "errors": e.errors},
        )
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create pool: {e}")
        raise HTTPException(status_code=500, detail="Failed to create pool")

    return PoolCreationResponse(**result)


@router.get("", response_model=List[PoolResponse])
async def list_pools(year: Optional[int] = Query(None), db: Session = Depends(get_db)):
    try:
        pools = PoolService(db).list_pools(year=year)
    except Exception as e:
        logger.error(f"Failed to fetch pools: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch pools")

    return [_pool_response(p) for p in pools]


@router.get("/{pool_id}", response_model=PoolResponse)
async def get_pool(pool_id: int, db: Session = Depends(get_db)):
    try:
        pool = PoolService(db).get_pool(pool_id)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return _pool_response(pool)


@router.delete("/{pool_id}", response_model=DeletePoolResponse)
async def delete_pool(pool_id: int, db: Session = Depends(get_db)):
    """Hard delete a pool and all of its members."""
    try:
        cascade = PoolService(db).delete_pool(pool_id)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete pool: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete pool")

    return DeletePoolResponse(success=True, pool_id=pool_id, deleted=cascade)
