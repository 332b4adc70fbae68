"""
FuelEU Compliance Ledger - Routes API Router

Vessel routes, baseline selection and baseline comparison.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.db_models import RouteDB
from ..services.errors import ComplianceServiceError
from ..services.route_service import RouteService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class RouteResponse(BaseModel):
    """A vessel route with emissions metrics."""
    id: int
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: float
    fuel_consumption: float
    distance: float
    total_emissions: float
    is_baseline: bool


class BaselineResponse(BaseModel):
    success: bool
    route_id: str


class ComparisonResponse(BaseModel):
    """A route measured against the baseline."""
    route: RouteResponse
    baseline_intensity: float
    percent_diff: float
    compliant: bool


class ComparisonSummary(BaseModel):
    baseline_route_id: Optional[str]
    total_routes: int
    compliant_routes: int
    non_compliant_routes: int
    compliance_rate: float


def _route_response(route: RouteDB) -> RouteResponse:
    return RouteResponse(
        id=route.id,
        route_id=route.route_id,
        vessel_type=route.vessel_type,
        fuel_type=route.fuel_type,
        year=route.year,
        ghg_intensity=route.ghg_intensity,
        fuel_consumption=route.fuel_consumption,
        distance=route.distance,
        total_emissions=route.total_emissions,
        is_baseline=bool(route.is_baseline),
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("", response_model=List[RouteResponse])
async def list_routes(
    vessel_type: Optional[str] = Query(None),
    fuel_type: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """List routes ordered by year and route id, optionally filtered."""
    try:
        routes = RouteService(db).list_routes(
            vessel_type=vessel_type, fuel_type=fuel_type, year=year
        )
    except Exception as e:
        logger.error(f"Failed to fetch routes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch routes")

    return [_route_response(r) for r in routes]


@router.get("/comparison", response_model=List[ComparisonResponse])
async def compare_routes(db: Session = Depends(get_db)):
    """
    Compare every route against the baseline.

    Empty while no baseline route is set.
    """
    try:
        comparisons = RouteService(db).compare_routes()
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to fetch comparison data: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch comparison data")

    return [
        ComparisonResponse(
            route=_route_response(c.route),
            baseline_intensity=c.baseline_intensity,
            percent_diff=c.percent_diff,
            compliant=c.compliant,
        )
        for c in comparisons
    ]


@router.get("/comparison/summary", response_model=ComparisonSummary)
async def comparison_summary(db: Session = Depends(get_db)):
    """Compliant route count and rate across all routes."""
    try:
        summary = RouteService(db).summarise_comparison()
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to fetch comparison summary: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch comparison summary")

    return ComparisonSummary(**summary)


@router.get("/{route_id}", response_model=RouteResponse)
async def get_route(route_id: str, db: Session = Depends(get_db)):
    try:
        route = RouteService(db).get_route(route_id)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return _route_response(route)


@router.post("/{route_id}/baseline", response_model=BaselineResponse)
async def set_baseline(route_id: str, db: Session = Depends(get_db)):
    """Make this route the single baseline route."""
    try:
        result = RouteService(db).set_baseline(route_id)
    except ComplianceServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set baseline: {e}")
        raise HTTPException(status_code=500, detail="Failed to set baseline")

    return BaselineResponse(**result)
