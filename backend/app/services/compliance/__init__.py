"""
Compliance Core

Pure FuelEU computations with no I/O:
- calculator: compliance balance, percent difference, compliance check
- pooling: Article 21 allocation and validation
"""

from .calculator import (
    TARGET_INTENSITY,
    ENERGY_CONVERSION_FACTOR,
    calculate_compliance_balance,
    calculate_percent_diff,
    is_compliant,
    compute_balance,
    percent_diff,
)
from .pooling import (
    allocate_pool_balances,
    validate_pool,
    pool_total,
    allocate,
    validate,
)

__all__ = [
    'TARGET_INTENSITY',
    'ENERGY_CONVERSION_FACTOR',
    'calculate_compliance_balance',
    'calculate_percent_diff',
    'is_compliant',
    'compute_balance',
    'percent_diff',
    'allocate_pool_balances',
    'validate_pool',
    'pool_total',
    'allocate',
    'validate',
]
