"""
Banking Service

Banking stores surplus CB for later; applying withdraws banked surplus to
offset a deficit. The bank ledger is append-only: banking appends a positive
entry, applying appends a negative one. The entry and the matching change to
the compliance record are committed together.
"""
import logging
import math
from typing import List

from sqlalchemy.orm import Session

from ..models.db_models import BankEntryDB
from .errors import InvalidRequestError
from .storage import DatabaseStorage


logger = logging.getLogger(__name__)


def _check_amount(amount: float) -> None:
    # NaN fails every comparison, so reject non-finite values first
    if not math.isfinite(amount):
        raise InvalidRequestError("Amount must be a finite number")
    if amount <= 0:
        raise InvalidRequestError("Amount must be positive")


class BankingService:

    def __init__(self, db: Session):
        self.db = db
        self.storage = DatabaseStorage(db)

    def get_records(self, ship_id: str, year: int) -> List[BankEntryDB]:
        return self.storage.get_bank_entries(ship_id, year)

    def bank_surplus(self, ship_id: str, year: int, amount: float) -> BankEntryDB:
        """
        Bank part of a ship's surplus.

        Raises:
            InvalidRequestError: amount not finite or not positive, no surplus, or amount
                larger than the surplus
        """
        _check_amount(amount)

        compliance = self.storage.get_ship_compliance(ship_id, year)
        current_cb = compliance.cb_gco2eq if compliance else 0.0

        if current_cb <= 0:
            raise InvalidRequestError("Cannot bank surplus when CB <= 0")
        if amount > current_cb:
            raise InvalidRequestError("Amount exceeds available surplus")

        try:
            entry = self.storage.create_bank_entry(ship_id, year, amount)
            self.storage.update_ship_compliance(compliance.id, current_cb - amount)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Banked {amount:.2f} gCO2eq for {ship_id}/{year}")
        return entry

    def apply_banked(self, ship_id: str, year: int, amount: float) -> BankEntryDB:
        """
        Apply previously banked surplus.

        Raises:
            InvalidRequestError: amount not finite, not positive or above the banked total
        """
        _check_amount(amount)

        total_banked = self.storage.get_total_banked(ship_id, year)
        if amount > total_banked:
            raise InvalidRequestError("Amount exceeds available banked surplus")

        try:
            entry = self.storage.create_bank_entry(ship_id, year, -amount)
            compliance = self.storage.get_ship_compliance(ship_id, year)
            if compliance:
                self.storage.update_ship_compliance(
                    compliance.id, compliance.cb_gco2eq + amount
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Applied {amount:.2f} gCO2eq of banked surplus for {ship_id}/{year}")
        return entry
