"""
Route Service

Route listing, baseline management and baseline comparison.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.compliance import RouteComparison
from ..models.db_models import RouteDB
from .compliance import calculate_percent_diff, is_compliant
from .errors import InvalidRequestError, NotFoundError
from .storage import DatabaseStorage


logger = logging.getLogger(__name__)


class RouteService:
    """Reads routes and moves the baseline flag."""

    def __init__(self, db: Session):
        self.db = db
        self.storage = DatabaseStorage(db)

    def list_routes(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[RouteDB]:
        return self.storage.get_all_routes(
            vessel_type=vessel_type, fuel_type=fuel_type, year=year
        )

    def get_route(self, route_id: str) -> RouteDB:
        route = self.storage.get_route_by_route_id(route_id)
        if not route:
            raise NotFoundError("Route not found")
        return route

    def set_baseline(self, route_id: str) -> Dict[str, Any]:
        self.get_route(route_id)
        if not self.storage.set_baseline(route_id):
            # Deleted between the lookup and the update
            raise NotFoundError("Route not found")
        return {"success": True, "route_id": route_id}

    def compare_routes(self) -> List[RouteComparison]:
        """
        Compare every route to the baseline.

        Returns an empty list while no baseline is set. The baseline itself
        always reports a 0% difference.
        """
        baseline = self.storage.get_baseline_route()
        if not baseline:
            return []

        if baseline.ghg_intensity <= 0:
            raise InvalidRequestError(
                f"Baseline route {baseline.route_id} has non-positive GHG intensity"
            )

        comparisons = []
        for route in self.storage.get_all_routes():
            is_baseline = route.id == baseline.id
            diff = 0.0 if is_baseline else calculate_percent_diff(
                route.ghg_intensity, baseline.ghg_intensity
            )
            comparisons.append(RouteComparison(
                route_id=route.route_id,
                ghg_intensity=route.ghg_intensity,
                baseline_intensity=baseline.ghg_intensity,
                percent_diff=diff,
                compliant=is_compliant(route.ghg_intensity),
                is_baseline=is_baseline,
                route=route,
            ))
        return comparisons

    def summarise_comparison(self) -> Dict[str, Any]:
        """Headline numbers for the comparison view."""
        comparisons = self.compare_routes()
        total = len(comparisons)
        compliant = sum(1 for c in comparisons if c.compliant)
        baseline = next((c for c in comparisons if c.is_baseline), None)
        return {
            "baseline_route_id": baseline.route_id if baseline else None,
            "total_routes": total,
            "compliant_routes": compliant,
            "non_compliant_routes": total - compliant,
            "compliance_rate": (compliant / total * 100) if total else 0.0,
        }
