"""FuelEU Compliance Ledger - Data Models"""
from .compliance import PoolMember, PoolValidationResult, RouteComparison
from .db_models import RouteDB, ShipComplianceDB, BankEntryDB, PoolDB, PoolMemberDB

__all__ = [
    "PoolMember", "PoolValidationResult", "RouteComparison",
    "RouteDB", "ShipComplianceDB", "BankEntryDB", "PoolDB", "PoolMemberDB",
]
