"""
Pool Service

Creates Article 21 pools from trusted state.

Client-submitted balances are never used: every member's cb_before is
re-derived from the stored compliance record for the pool year, falling
back to a fresh calculation from the ship's route.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..models.compliance import PoolMember
from ..models.db_models import PoolDB
from .compliance import (
    allocate_pool_balances,
    calculate_compliance_balance,
    pool_total,
    validate_pool,
)
from .errors import InvalidRequestError, NotFoundError, PoolValidationError
from .storage import DatabaseStorage


logger = logging.getLogger(__name__)

MIN_POOL_MEMBERS = 2


class PoolService:

    def __init__(self, db: Session):
        self.db = db
        self.storage = DatabaseStorage(db)

    def _trusted_balance(self, ship_id: str, year: int) -> float:
        route = self.storage.get_route_by_route_id(ship_id)
        if not route:
            raise InvalidRequestError(f"Route not found for ship {ship_id}")

        compliance = self.storage.get_ship_compliance(ship_id, year)
        if compliance is not None:
            return compliance.cb_gco2eq
        return calculate_compliance_balance(route.ghg_intensity, route.fuel_consumption)

    def create_pool(self, year: int, ship_ids: Iterable[str]) -> Dict[str, Any]:
        """
        Allocate, validate and persist a pool.

        Raises:
            InvalidRequestError: too few members, duplicates, unknown ship
            PoolValidationError: the allocation breaks an Article 21 rule
        """
        ship_ids = list(ship_ids)
        if len(ship_ids) < MIN_POOL_MEMBERS:
            raise InvalidRequestError("Pool requires year and at least 2 members")

        duplicates = sorted({s for s in ship_ids if ship_ids.count(s) > 1})
        if duplicates:
            raise InvalidRequestError(f"Duplicate ships in pool: {', '.join(duplicates)}")

        verified = [
            PoolMember(ship_id=ship_id, cb_before=self._trusted_balance(ship_id, year))
            for ship_id in ship_ids
        ]

        allocated = allocate_pool_balances(verified)
        validation = validate_pool(allocated)
        if not validation.valid:
            logger.warning(f"Pool for {year} rejected: {validation.errors}")
            raise PoolValidationError(validation.errors)

        pool = self.storage.create_pool_with_members(year, allocated)
        total = pool_total(verified)

        logger.info(f"Created pool {pool.id} for {year} with {len(allocated)} members")
        return {
            "pool_id": pool.id,
            "year": year,
            "members": [m.to_dict() for m in allocated],
            "total_sum": total,
            "valid": True,
            "errors": [],
        }

    def list_pools(self, year: Optional[int] = None) -> List[PoolDB]:
        return self.storage.get_pools(year=year)

    def get_pool(self, pool_id: int) -> PoolDB:
        pool = self.storage.get_pool(pool_id)
        if not pool:
            raise NotFoundError("Pool not found")
        return pool

    def delete_pool(self, pool_id: int) -> Dict[str, int]:
        try:
            cascade = self.storage.delete_pool(pool_id)
            if cascade is None:
                raise NotFoundError("Pool not found")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted pool {pool_id}")
        return cascade
