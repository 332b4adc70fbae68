#!/usr/bin/env python3
"""
Route Seed Script
Replaces all routes with the reference data set. R001 is the initial baseline.

Usage:
    python -m scripts.seed_routes
"""
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from app.database import SessionLocal, init_db
from app.models.db_models import RouteDB
from app.services.storage import DatabaseStorage


SEED_ROUTES = [
    {"route_id": "R001", "vessel_type": "Container", "fuel_type": "HFO", "year": 2024,
     "ghg_intensity": 91.0, "fuel_consumption": 5000, "distance": 12000,
     "total_emissions": 4500, "is_baseline": True},
    {"route_id": "R002", "vessel_type": "BulkCarrier", "fuel_type": "LNG", "year": 2024,
     "ghg_intensity": 88.0, "fuel_consumption": 4800, "distance": 11500,
     "total_emissions": 4200, "is_baseline": False},
    {"route_id": "R003", "vessel_type": "Tanker", "fuel_type": "MGO", "year": 2024,
     "ghg_intensity": 93.5, "fuel_consumption": 5100, "distance": 12500,
     "total_emissions": 4700, "is_baseline": False},
    {"route_id": "R004", "vessel_type": "RoRo", "fuel_type": "HFO", "year": 2025,
     "ghg_intensity": 89.2, "fuel_consumption": 4900, "distance": 11800,
     "total_emissions": 4300, "is_baseline": False},
    {"route_id": "R005", "vessel_type": "Container", "fuel_type": "LNG", "year": 2025,
     "ghg_intensity": 90.5, "fuel_consumption": 4950, "distance": 11900,
     "total_emissions": 4400, "is_baseline": False},
]


def seed_routes(db: Session) -> int:
    """Clear existing routes and insert the reference set. Returns the count."""
    db.query(RouteDB).delete(synchronize_session=False)

    storage = DatabaseStorage(db)
    for fields in SEED_ROUTES:
        storage.create_route(**fields)

    db.commit()
    return len(SEED_ROUTES)


def main() -> int:
    # Ensure tables exist
    init_db()

    db: Session = SessionLocal()
    try:
        count = seed_routes(db)
    except Exception as e:
        db.rollback()
        print(f"Error: Seeding failed: {e}")
        return 1
    finally:
        db.close()

    baseline = next(r["route_id"] for r in SEED_ROUTES if r["is_baseline"])
    print(f"Seeded {count} routes.")
    print(f"Baseline route: {baseline}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
