"""
Compliance Calculator

AUTHORITY: SYSTEM
Converts route telemetry into a signed compliance balance (CB) using the
FuelEU Maritime formula:

    CB = (Target - Actual) x Energy in scope

Positive CB = surplus, negative CB = deficit.
Pure functions only - no database, no framework.
"""

# =============================================================================
# REGULATORY CONSTANTS
# =============================================================================

TARGET_INTENSITY = 89.3368          # gCO2e/MJ - 2% below 91.16
ENERGY_CONVERSION_FACTOR = 41000    # MJ per tonne of fuel


def calculate_compliance_balance(ghg_intensity: float, fuel_consumption: float) -> float:
    """
    Calculate compliance balance in gCO2eq.

    Args:
        ghg_intensity: Actual GHG intensity (gCO2e/MJ)
        fuel_consumption: Fuel burned (tonnes)

    Returns:
        Signed balance; positive is surplus, negative is deficit
    """
    energy_in_scope = fuel_consumption * ENERGY_CONVERSION_FACTOR  # MJ
    return (TARGET_INTENSITY - ghg_intensity) * energy_in_scope


def calculate_percent_diff(comparison_intensity: float, baseline_intensity: float) -> float:
    """
    Percentage difference of a route against the baseline.

    Formula: ((comparison / baseline) - 1) x 100

    Raises:
        ValueError: baseline intensity is zero or negative
    """
    if baseline_intensity <= 0:
        raise ValueError(
            f"Baseline GHG intensity must be positive, got {baseline_intensity}"
        )
    return ((comparison_intensity / baseline_intensity) - 1) * 100


def is_compliant(ghg_intensity: float) -> bool:
    """A route is compliant when its intensity is at or below target."""
    return ghg_intensity <= TARGET_INTENSITY


# Boundary contract names
compute_balance = calculate_compliance_balance
percent_diff = calculate_percent_diff
