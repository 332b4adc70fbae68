"""
Database Storage Adapter

Persistence port for the compliance ledger. Every read and write of routes,
compliance records, bank entries and pools goes through DatabaseStorage.

Transaction rules:
- Plain writes flush only; the calling service commits.
- set_baseline and create_pool_with_members own their transaction and
  commit (or roll back) themselves.
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.compliance import PoolMember
from ..models.db_models import (
    RouteDB, ShipComplianceDB, BankEntryDB, PoolDB, PoolMemberDB,
)


logger = logging.getLogger(__name__)


class DatabaseStorage:
    """SQLAlchemy adapter implementing the ledger's storage operations."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # ROUTES
    # =========================================================================

    def get_all_routes(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[RouteDB]:
        query = self.db.query(RouteDB)
        if vessel_type:
            query = query.filter(RouteDB.vessel_type == vessel_type)
        if fuel_type:
            query = query.filter(RouteDB.fuel_type == fuel_type)
        if year is not None:
            query = query.filter(RouteDB.year == year)
        return query.order_by(RouteDB.year, RouteDB.route_id).all()

    def get_route_by_id(self, id: int) -> Optional[RouteDB]:
        return self.db.query(RouteDB).filter(RouteDB.id == id).first()

    def get_route_by_route_id(self, route_id: str) -> Optional[RouteDB]:
        return self.db.query(RouteDB).filter(RouteDB.route_id == route_id).first()

    def create_route(self, **fields: Any) -> RouteDB:
        route = RouteDB(**fields)
        self.db.add(route)
        self.db.flush()
        return route

    def get_baseline_route(self) -> Optional[RouteDB]:
        return self.db.query(RouteDB).filter(RouteDB.is_baseline.is_(True)).first()

    def set_baseline(self, route_id: str) -> bool:
        """
        Make route_id the single baseline route.

        Clears every baseline flag and sets the target inside one transaction.
        Returns False (and leaves the table untouched) if the route is unknown.
        """
        try:
            self.db.query(RouteDB).update(
                {RouteDB.is_baseline: False}, synchronize_session=False
            )
            updated = self.db.query(RouteDB).filter(
                RouteDB.route_id == route_id
            ).update({RouteDB.is_baseline: True}, synchronize_session=False)

            if not updated:
                self.db.rollback()
                return False

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        # Bulk updates bypass the identity map
        self.db.expire_all()
        logger.info(f"Baseline route set to {route_id}")
        return True

    # =========================================================================
    # SHIP COMPLIANCE
    # =========================================================================

    def get_ship_compliance(self, ship_id: str, year: int) -> Optional[ShipComplianceDB]:
        """Newest compliance record for (ship, year)."""
        return (
            self.db.query(ShipComplianceDB)
            .filter(ShipComplianceDB.ship_id == ship_id, ShipComplianceDB.year == year)
            .order_by(ShipComplianceDB.created_at.desc(), ShipComplianceDB.id.desc())
            .first()
        )

    def create_ship_compliance(self, ship_id: str, year: int, cb_gco2eq: float) -> ShipComplianceDB:
        record = ShipComplianceDB(
            ship_id=ship_id,
            year=year,
            cb_gco2eq=cb_gco2eq,
            created_at=datetime.utcnow(),
        )
        self.db.add(record)
        self.db.flush()
        return record

    def update_ship_compliance(self, record_id: int, cb_gco2eq: float) -> None:
        self.db.query(ShipComplianceDB).filter(
            ShipComplianceDB.id == record_id
        ).update({ShipComplianceDB.cb_gco2eq: cb_gco2eq}, synchronize_session="fetch")

    def upsert_ship_compliance(self, ship_id: str, year: int, cb_gco2eq: float) -> ShipComplianceDB:
        """Update the existing (ship, year) record or create it."""
        existing = self.get_ship_compliance(ship_id, year)
        if existing:
            existing.cb_gco2eq = cb_gco2eq
            self.db.flush()
            return existing
        return self.create_ship_compliance(ship_id, year, cb_gco2eq)

    # =========================================================================
    # BANK ENTRIES
    # =========================================================================

    def get_bank_entries(self, ship_id: str, year: int) -> List[BankEntryDB]:
        return (
            self.db.query(BankEntryDB)
            .filter(BankEntryDB.ship_id == ship_id, BankEntryDB.year == year)
            .order_by(BankEntryDB.created_at.desc(), BankEntryDB.id.desc())
            .all()
        )

    def create_bank_entry(self, ship_id: str, year: int, amount_gco2eq: float) -> BankEntryDB:
        entry = BankEntryDB(
            ship_id=ship_id,
            year=year,
            amount_gco2eq=amount_gco2eq,
            created_at=datetime.utcnow(),
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_total_banked(self, ship_id: str, year: int) -> float:
        """Running total of the bank ledger for (ship, year)."""
        total = (
            self.db.query(func.coalesce(func.sum(BankEntryDB.amount_gco2eq), 0.0))
            .filter(BankEntryDB.ship_id == ship_id, BankEntryDB.year == year)
            .scalar()
        )
        return float(total or 0.0)

    # =========================================================================
    # POOLS
    # =========================================================================

    def create_pool_with_members(self, year: int, members: Iterable[PoolMember]) -> PoolDB:
        """
        Persist a pool and all of its members atomically.

        Either every row is committed or none is.
        """
        try:
            pool = PoolDB(year=year, created_at=datetime.utcnow())
            self.db.add(pool)
            self.db.flush()

            for member in members:
                self.db.add(PoolMemberDB(
                    pool_id=pool.id,
                    ship_id=member.ship_id,
                    cb_before=member.cb_before,
                    cb_after=member.cb_after,
                ))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(pool)
        return pool

    def get_pool(self, pool_id: int) -> Optional[PoolDB]:
        return self.db.query(PoolDB).filter(PoolDB.id == pool_id).first()

    def get_pools(self, year: Optional[int] = None) -> List[PoolDB]:
        query = self.db.query(PoolDB)
        if year is not None:
            query = query.filter(PoolDB.year == year)
        return query.order_by(PoolDB.created_at.desc(), PoolDB.id.desc()).all()

    def get_pool_members(self, pool_id: int) -> List[PoolMemberDB]:
        return (
            self.db.query(PoolMemberDB)
            .filter(PoolMemberDB.pool_id == pool_id)
            .order_by(PoolMemberDB.id)
            .all()
        )

    def delete_pool(self, pool_id: int) -> Optional[Dict[str, int]]:
        """
        Hard delete a pool and its members.

        Returns cascade counts, or None if the pool does not exist.
        """
        pool = self.get_pool(pool_id)
        if not pool:
            return None

        # Members go with the pool via the relationship cascade
        members = len(pool.members)
        self.db.delete(pool)
        self.db.flush()
        return {"pools": 1, "pool_members": members}
