"""
FuelEU Compliance Ledger - SQLAlchemy ORM Models
PostgreSQL database models for persistent storage
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from ..database import Base


class RouteDB(Base):
    """Vessel route with emissions metrics."""
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    route_id = Column(String(50), unique=True, nullable=False, index=True)
    vessel_type = Column(String(100), nullable=False)
    fuel_type = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    ghg_intensity = Column(Float, nullable=False)  # gCO2e/MJ
    fuel_consumption = Column(Float, nullable=False)  # tonnes
    distance = Column(Float, nullable=False)  # km
    total_emissions = Column(Float, nullable=False)  # tonnes

    # At most one baseline; enforced by DatabaseStorage.set_baseline
    is_baseline = Column(Boolean, nullable=False, default=False)


class ShipComplianceDB(Base):
    """Computed compliance balance for a ship and year."""
    __tablename__ = "ship_compliance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ship_id = Column(String(50), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    cb_gco2eq = Column(Float, nullable=False)  # Compliance Balance in gCO2eq
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class BankEntryDB(Base):
    """
    Append-only banking ledger.

    Positive amounts bank surplus, negative amounts apply it.
    """
    __tablename__ = "bank_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ship_id = Column(String(50), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    amount_gco2eq = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class PoolDB(Base):
    """Registry of compliance pools."""
    __tablename__ = "pools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    members = relationship(
        "PoolMemberDB",
        back_populates="pool",
        cascade="all, delete-orphan",
        order_by="PoolMemberDB.id",
    )


class PoolMemberDB(Base):
    """Ship participation in a pool with CB before and after allocation."""
    __tablename__ = "pool_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pool_id = Column(Integer, ForeignKey("pools.id", ondelete="CASCADE"), nullable=False, index=True)
    ship_id = Column(String(50), nullable=False)
    cb_before = Column(Float, nullable=False)
    cb_after = Column(Float, nullable=False)

    pool = relationship("PoolDB", back_populates="members")
