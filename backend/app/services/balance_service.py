"""
Balance Service

Derives a ship's compliance balance from its route data and keeps one
compliance record per (ship, year) up to date.

A ship id resolves to the route with the same route_id.
"""
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from .compliance import calculate_compliance_balance
from .storage import DatabaseStorage


logger = logging.getLogger(__name__)


class BalanceService:

    def __init__(self, db: Session):
        self.db = db
        self.storage = DatabaseStorage(db)

    def compute_balance(self, ship_id: str, year: int) -> Dict[str, Any]:
        """
        Recompute CB from route data and upsert the compliance record.

        Unknown ships report CB 0 and nothing is stored. Calling this twice
        leaves a single record with the same value.
        """
        route = self.storage.get_route_by_route_id(ship_id)
        if not route:
            return {"ship_id": ship_id, "year": year, "cb": 0.0}

        cb = calculate_compliance_balance(route.ghg_intensity, route.fuel_consumption)
        self.storage.upsert_ship_compliance(ship_id, year, cb)
        self.db.commit()

        logger.info(f"Compliance balance for {ship_id}/{year}: {cb:.2f} gCO2eq")
        return {"ship_id": ship_id, "year": year, "cb": cb}

    def adjusted_balance(self, ship_id: str, year: int) -> Dict[str, Any]:
        """Stored CB plus the banked total for the same (ship, year)."""
        compliance = self.storage.get_ship_compliance(ship_id, year)
        total_banked = self.storage.get_total_banked(ship_id, year)

        base_cb = compliance.cb_gco2eq if compliance else 0.0
        return {
            "ship_id": ship_id,
            "year": year,
            "cb": base_cb + total_banked,
            "cb_before": base_cb,
            "applied": total_banked,
        }
