"""FuelEU Compliance Ledger - API Routers"""
from .routes import router as routes_router
from .compliance import router as compliance_router
from .banking import router as banking_router
from .pools import router as pools_router

__all__ = [
    "routes_router",
    "compliance_router",
    "banking_router",
    "pools_router",
]
