"""
Test Suite for the Ledger Services

Service logic tested against a mocked session and storage adapter.

Key tests:
1. Compliance balance is computed from route data and upserted
2. Banking rules (positive amount, surplus available, limits)
3. Apply rules (banked total limit, CB restored)
4. Pool creation re-derives balances and rejects invalid pools
5. Failures roll the session back
"""
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from app.models.compliance import PoolMember
from app.services.balance_service import BalanceService
from app.services.banking_service import BankingService
from app.services.pool_service import PoolService
from app.services.route_service import RouteService
from app.services.errors import (
    ComplianceServiceError,
    InvalidRequestError,
    NotFoundError,
    PoolValidationError,
)


def _route(route_id, ghg_intensity, fuel_consumption, id=1, is_baseline=False):
    return SimpleNamespace(
        id=id,
        route_id=route_id,
        ghg_intensity=ghg_intensity,
        fuel_consumption=fuel_consumption,
        is_baseline=is_baseline,
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = MagicMock()
    db.add = MagicMock()
    db.flush = MagicMock()
    db.commit = MagicMock()
    db.rollback = MagicMock()
    return db


@pytest.fixture
def balance_service(mock_db):
    service = BalanceService(mock_db)
    service.storage = MagicMock()
    return service


@pytest.fixture
def banking_service(mock_db):
    service = BankingService(mock_db)
    service.storage = MagicMock()
    return service


@pytest.fixture
def pool_service(mock_db):
    service = PoolService(mock_db)
    service.storage = MagicMock()
    return service


@pytest.fixture
def route_service(mock_db):
    service = RouteService(mock_db)
    service.storage = MagicMock()
    return service


# =============================================================================
# BALANCE SERVICE
# =============================================================================

class TestBalanceService:

    def test_compute_balance_upserts(self, balance_service, mock_db):
        balance_service.storage.get_route_by_route_id.return_value = _route("R002", 88.0, 4800)

        result = balance_service.compute_balance("R002", 2024)

        assert result["ship_id"] == "R002"
        assert result["year"] == 2024
        assert result["cb"] == pytest.approx(263_082_240)
        balance_service.storage.upsert_ship_compliance.assert_called_once_with(
            "R002", 2024, result["cb"]
        )
        mock_db.commit.assert_called_once()

    def test_unknown_ship_reports_zero(self, balance_service, mock_db):
        balance_service.storage.get_route_by_route_id.return_value = None

        result = balance_service.compute_balance("NOPE", 2024)

        assert result == {"ship_id": "NOPE", "year": 2024, "cb": 0.0}
        balance_service.storage.upsert_ship_compliance.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_adjusted_balance_adds_banked_total(self, balance_service):
        balance_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=1, cb_gco2eq=300.0)
        balance_service.storage.get_total_banked.return_value = 200.0

        result = balance_service.adjusted_balance("R002", 2024)

        assert result["cb"] == 500.0
        assert result["cb_before"] == 300.0
        assert result["applied"] == 200.0

    def test_adjusted_balance_without_record(self, balance_service):
        balance_service.storage.get_ship_compliance.return_value = None
        balance_service.storage.get_total_banked.return_value = 0.0

        result = balance_service.adjusted_balance("R009", 2024)

        assert result["cb"] == 0.0
        assert result["cb_before"] == 0.0


# =============================================================================
# BANKING SERVICE
# =============================================================================

class TestBankingService:

    @pytest.mark.parametrize("amount", [0, -5])
    def test_bank_requires_positive_amount(self, banking_service, amount):
        with pytest.raises(InvalidRequestError, match="Amount must be positive"):
            banking_service.bank_surplus("R002", 2024, amount)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_bank_rejects_non_finite_amount(self, banking_service, mock_db, amount):
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=1, cb_gco2eq=100.0)

        with pytest.raises(InvalidRequestError, match="finite number"):
            banking_service.bank_surplus("R002", 2024, amount)

        banking_service.storage.create_bank_entry.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.parametrize("amount", [float("nan"), float("inf")])
    def test_apply_rejects_non_finite_amount(self, banking_service, mock_db, amount):
        banking_service.storage.get_total_banked.return_value = 100.0

        with pytest.raises(InvalidRequestError, match="finite number"):
            banking_service.apply_banked("R002", 2024, amount)

        banking_service.storage.create_bank_entry.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_bank_requires_surplus(self, banking_service):
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=1, cb_gco2eq=-10.0)

        with pytest.raises(InvalidRequestError, match="CB <= 0"):
            banking_service.bank_surplus("R001", 2024, 5)

    def test_bank_without_record(self, banking_service):
        banking_service.storage.get_ship_compliance.return_value = None

        with pytest.raises(InvalidRequestError, match="CB <= 0"):
            banking_service.bank_surplus("R002", 2024, 5)

    def test_bank_cannot_exceed_surplus(self, banking_service):
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=1, cb_gco2eq=100.0)

        with pytest.raises(InvalidRequestError, match="exceeds available surplus"):
            banking_service.bank_surplus("R002", 2024, 100.5)

    def test_bank_appends_entry_and_reduces_cb(self, banking_service, mock_db):
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=7, cb_gco2eq=100.0)
        banking_service.storage.create_bank_entry.return_value = SimpleNamespace(amount_gco2eq=40.0)

        entry = banking_service.bank_surplus("R002", 2024, 40)

        assert entry.amount_gco2eq == 40.0
        banking_service.storage.create_bank_entry.assert_called_once_with("R002", 2024, 40)
        banking_service.storage.update_ship_compliance.assert_called_once_with(7, 60.0)
        mock_db.commit.assert_called_once()

    def test_bank_rolls_back_on_failure(self, banking_service, mock_db):
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=7, cb_gco2eq=100.0)
        banking_service.storage.update_ship_compliance.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            banking_service.bank_surplus("R002", 2024, 40)

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    def test_apply_cannot_exceed_banked(self, banking_service):
        banking_service.storage.get_total_banked.return_value = 30.0

        with pytest.raises(InvalidRequestError, match="exceeds available banked surplus"):
            banking_service.apply_banked("R002", 2024, 31)

    def test_apply_appends_negative_entry_and_raises_cb(self, banking_service, mock_db):
        banking_service.storage.get_total_banked.return_value = 30.0
        banking_service.storage.get_ship_compliance.return_value = SimpleNamespace(id=3, cb_gco2eq=-50.0)

        banking_service.apply_banked("R005", 2025, 30)

        banking_service.storage.create_bank_entry.assert_called_once_with("R005", 2025, -30)
        banking_service.storage.update_ship_compliance.assert_called_once_with(3, -20.0)
        mock_db.commit.assert_called_once()

    def test_apply_without_record_only_appends(self, banking_service, mock_db):
        banking_service.storage.get_total_banked.return_value = 30.0
        banking_service.storage.get_ship_compliance.return_value = None

        banking_service.apply_banked("R005", 2025, 10)

        banking_service.storage.create_bank_entry.assert_called_once_with("R005", 2025, -10)
        banking_service.storage.update_ship_compliance.assert_not_called()
        mock_db.commit.assert_called_once()


# =============================================================================
# POOL SERVICE
# =============================================================================

class TestPoolService:

    def test_requires_two_members(self, pool_service):
        with pytest.raises(InvalidRequestError, match="at least 2 members"):
            pool_service.create_pool(2024, ["R002"])

    def test_rejects_duplicates(self, pool_service):
        with pytest.raises(InvalidRequestError, match="Duplicate ships in pool: R002"):
            pool_service.create_pool(2024, ["R002", "R002", "R001"])

    def test_unknown_ship_rejected(self, pool_service):
        pool_service.storage.get_route_by_route_id.return_value = None

        with pytest.raises(InvalidRequestError, match="Route not found for ship R404"):
            pool_service.create_pool(2024, ["R404", "R002"])

    def test_stored_record_preferred_over_route(self, pool_service):
        routes = {"A": _route("A", 88.0, 1), "B": _route("B", 91.0, 1)}
        stored = {"A": SimpleNamespace(cb_gco2eq=100.0), "B": SimpleNamespace(cb_gco2eq=-40.0)}
        pool_service.storage.get_route_by_route_id.side_effect = routes.get
        pool_service.storage.get_ship_compliance.side_effect = lambda ship_id, year: stored[ship_id]
        pool_service.storage.create_pool_with_members.return_value = SimpleNamespace(id=11)

        result = pool_service.create_pool(2024, ["A", "B"])

        assert result["pool_id"] == 11
        assert result["valid"] is True
        assert result["total_sum"] == 60.0
        assert result["members"] == [
            {"ship_id": "A", "cb_before": 100.0, "cb_after": 60.0},
            {"ship_id": "B", "cb_before": -40.0, "cb_after": 0.0},
        ]
        year, members = pool_service.storage.create_pool_with_members.call_args[0]
        assert year == 2024
        assert all(isinstance(m, PoolMember) for m in members)

    def test_falls_back_to_route_calculation(self, pool_service):
        pool_service.storage.get_route_by_route_id.side_effect = lambda s: {
            "R002": _route("R002", 88.0, 4800),
            "R004": _route("R004", 89.2, 4900),
        }[s]
        pool_service.storage.get_ship_compliance.return_value = None
        pool_service.storage.create_pool_with_members.return_value = SimpleNamespace(id=1)

        result = pool_service.create_pool(2025, ["R004", "R002"])

        by_ship = {m["ship_id"]: m for m in result["members"]}
        assert by_ship["R002"]["cb_before"] == pytest.approx(263_082_240)
        assert by_ship["R004"]["cb_before"] == pytest.approx(27_483_120)

    def test_invalid_pool_not_persisted(self, pool_service):
        pool_service.storage.get_route_by_route_id.side_effect = lambda s: _route(s, 90.0, 1)
        stored = {"A": SimpleNamespace(cb_gco2eq=10.0), "B": SimpleNamespace(cb_gco2eq=-40.0)}
        pool_service.storage.get_ship_compliance.side_effect = lambda ship_id, year: stored[ship_id]

        with pytest.raises(PoolValidationError) as exc_info:
            pool_service.create_pool(2024, ["A", "B"])

        assert exc_info.value.errors == ["Total pool sum must be >= 0"]
        assert exc_info.value.status_code == 400
        pool_service.storage.create_pool_with_members.assert_not_called()

    def test_get_missing_pool(self, pool_service):
        pool_service.storage.get_pool.return_value = None

        with pytest.raises(NotFoundError):
            pool_service.get_pool(99)

    def test_delete_missing_pool_rolls_back(self, pool_service, mock_db):
        pool_service.storage.delete_pool.return_value = None

        with pytest.raises(NotFoundError):
            pool_service.delete_pool(99)

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    def test_delete_pool_commits(self, pool_service, mock_db):
        pool_service.storage.delete_pool.return_value = {"pools": 1, "pool_members": 3}

        assert pool_service.delete_pool(4) == {"pools": 1, "pool_members": 3}
        mock_db.commit.assert_called_once()


# =============================================================================
# ROUTE SERVICE
# =============================================================================

class TestRouteService:

    def test_no_baseline_means_no_comparison(self, route_service):
        route_service.storage.get_baseline_route.return_value = None

        assert route_service.compare_routes() == []
        route_service.storage.get_all_routes.assert_not_called()

    def test_comparison_against_baseline(self, route_service):
        baseline = _route("R001", 91.0, 5000, id=1, is_baseline=True)
        other = _route("R002", 88.0, 4800, id=2)
        route_service.storage.get_baseline_route.return_value = baseline
        route_service.storage.get_all_routes.return_value = [baseline, other]

        first, second = route_service.compare_routes()

        assert first.is_baseline is True
        assert first.percent_diff == 0.0
        assert first.compliant is False
        assert second.percent_diff == pytest.approx(-3.2967, abs=1e-4)
        assert second.compliant is True
        assert second.baseline_intensity == 91.0
        assert first.route is baseline
        assert second.route is other
        route_service.storage.get_all_routes.assert_called_once_with()

    def test_zero_intensity_baseline_rejected(self, route_service):
        route_service.storage.get_baseline_route.return_value = _route("R0", 0.0, 1, is_baseline=True)

        with pytest.raises(InvalidRequestError):
            route_service.compare_routes()

    def test_set_baseline_unknown_route(self, route_service):
        route_service.storage.get_route_by_route_id.return_value = None

        with pytest.raises(NotFoundError):
            route_service.set_baseline("R999")
        route_service.storage.set_baseline.assert_not_called()

    def test_set_baseline(self, route_service):
        route_service.storage.get_route_by_route_id.return_value = _route("R003", 93.5, 5100)
        route_service.storage.set_baseline.return_value = True

        assert route_service.set_baseline("R003") == {"success": True, "route_id": "R003"}

    def test_errors_share_a_base(self):
        assert issubclass(NotFoundError, ComplianceServiceError)
        assert NotFoundError.status_code == 404
        assert InvalidRequestError.status_code == 400
