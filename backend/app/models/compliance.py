"""
FuelEU Compliance Ledger - Domain Models

Plain data structures passed between the pure compliance core and the
orchestration services. None of these know about the database.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any


@dataclass
class PoolMember:
    """A ship inside a pool. cb_after is None until allocation has run."""
    ship_id: str
    cb_before: float
    cb_after: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PoolValidationResult:
    """Outcome of the Article 21 pool checks. Failure is data, not an exception."""
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class RouteComparison:
    """One route measured against the current baseline route."""
    route_id: str
    ghg_intensity: float
    baseline_intensity: float
    percent_diff: float
    compliant: bool
    is_baseline: bool = False
    # The compared RouteDB row, so callers need no second lookup
    route: Any = None
