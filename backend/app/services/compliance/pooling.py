"""
Pool Allocator (Article 21)

Greedy redistribution of compliance balances across pool members, plus the
three regulatory checks every pool must pass before it is persisted.

Rules:
1. Sum of all CBs must be >= 0
2. Deficit ships cannot exit worse than entry
3. Surplus ships cannot exit with negative CB

cb_before values must come from trusted storage; PoolService re-derives
them before calling in here.
"""
from typing import Any, Iterable, List, Mapping, Union

from ...models.compliance import PoolMember, PoolValidationResult


MemberInput = Union[PoolMember, Mapping[str, Any]]


def _to_member(member: MemberInput) -> PoolMember:
    """Copy input into a fresh PoolMember so callers' objects are never mutated."""
    if isinstance(member, PoolMember):
        return PoolMember(
            ship_id=member.ship_id,
            cb_before=member.cb_before,
            cb_after=member.cb_after,
        )
    return PoolMember(
        ship_id=member["ship_id"],
        cb_before=member["cb_before"],
        cb_after=member.get("cb_after"),
    )


def pool_total(members: Iterable[MemberInput]) -> float:
    """Aggregate CB of the pool before allocation."""
    return sum(_to_member(m).cb_before for m in members)


def allocate_pool_balances(members: Iterable[MemberInput]) -> List[PoolMember]:
    """
    Transfer surplus to deficits, largest first.

    Members are sorted by cb_before descending (ties on ship_id ascending),
    then a surplus cursor walks down from the head while a deficit cursor
    walks up from the tail. Each step moves min(surplus, |deficit|).

    Never raises. Returns new PoolMember objects with cb_after set, in
    sorted order.
    """
    results = sorted(
        (_to_member(m) for m in members),
        key=lambda m: (-m.cb_before, m.ship_id),
    )
    for member in results:
        member.cb_after = member.cb_before

    surplus_idx = 0
    deficit_idx = len(results) - 1

    while surplus_idx < deficit_idx:
        surplus = results[surplus_idx]
        deficit = results[deficit_idx]

        if surplus.cb_after <= 0:
            surplus_idx += 1
            continue

        if deficit.cb_after >= 0:
            deficit_idx -= 1
            continue

        transfer = min(surplus.cb_after, abs(deficit.cb_after))
        surplus.cb_after -= transfer
        deficit.cb_after += transfer

        if surplus.cb_after <= 0:
            surplus_idx += 1
        if deficit.cb_after >= 0:
            deficit_idx -= 1

    return results


def validate_pool(members: Iterable[MemberInput]) -> PoolValidationResult:
    """
    Check the Article 21 rules against an allocated pool.

    Every rule is evaluated; violations accumulate as human-readable strings.
    """
    pool = [_to_member(m) for m in members]
    errors: List[str] = []

    # Rule 1: aggregate must not be in deficit
    if pool_total(pool) < 0:
        errors.append("Total pool sum must be >= 0")

    # Rule 2: deficit ships cannot exit worse
    for member in pool:
        if member.cb_before < 0 and member.cb_after < member.cb_before:
            errors.append(f"Ship {member.ship_id} would exit worse than entry")

    # Rule 3: surplus ships cannot exit negative
    for member in pool:
        if member.cb_before > 0 and member.cb_after < 0:
            errors.append(f"Ship {member.ship_id} would exit with negative CB")

    return PoolValidationResult(valid=not errors, errors=errors)


# Boundary contract names
allocate = allocate_pool_balances
validate = validate_pool
