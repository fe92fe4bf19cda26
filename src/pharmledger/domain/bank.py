"""Bank account domain service."""

import logging
from typing import Optional

from pharmledger.database.base import Database
from pharmledger.domain.entities import BankAccount, AccountType
from pharmledger.domain.errors import (
    ValidationError,
    NotFoundError,
    bank_account_not_found,
    account_code_not_found,
)

logger = logging.getLogger(__name__)


class BankAccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_bank_account(
        self,
        name: str,
        bank_name: str,
        ledger_account_code: str,
        account_number: Optional[str] = None,
        currency: str = "IDR",
    ) -> BankAccount:
        """Create a new bank account.

        Args:
            name: Bank account name
            bank_name: Bank name
            ledger_account_code: Code of the asset account the bank posts to
            account_number: Account number at the bank
            currency: Account currency

        Returns:
            Created bank account

        Raises:
            ValidationError: If the name already exists or the ledger account
                is not an active postable asset account
        """
        for acc in self.db.list_bank_accounts():
            if acc.name == name:
                raise ValidationError(f"Bank account with name '{name}' already exists")

        ledger_account = self.db.get_account_by_code(ledger_account_code)
        if ledger_account is None:
            raise ValidationError(account_code_not_found(ledger_account_code))
        if ledger_account.account_type != AccountType.ASSET or not ledger_account.is_postable:
            raise ValidationError(
                f"Account {ledger_account.code} must be an active, non-header asset account"
            )

        bank_account_id = self.db.create_bank_account(
            name=name,
            bank_name=bank_name,
            ledger_account_id=ledger_account.id,
            account_number=account_number,
            currency=(currency or "IDR").upper(),
        )
        logger.info("Created bank account %s on ledger account %s", name, ledger_account.code)
        return self.db.get_bank_account(bank_account_id)

    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        return self.db.get_bank_account(bank_account_id)

    def require_bank_account(self, bank_account_id: int) -> BankAccount:
        bank_account = self.db.get_bank_account(bank_account_id)
        if bank_account is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        return bank_account

    def list_bank_accounts(self) -> list[BankAccount]:
        """List all bank accounts."""
        return self.db.list_bank_accounts()

    def rename_bank_account(
        self, bank_account_id: int, name: str, bank_name: Optional[str] = None
    ) -> None:
        """Rename a bank account.

        Args:
            bank_account_id: Bank account ID to rename
            name: New name
            bank_name: Optional new bank name (if None, bank_name is not updated)

        Raises:
            NotFoundError: If the bank account does not exist
            ValidationError: If the name already exists
        """
        self.require_bank_account(bank_account_id)

        for acc in self.db.list_bank_accounts():
            if acc.id != bank_account_id and acc.name == name:
                raise ValidationError(f"Bank account with name '{name}' already exists")

        self.db.update_bank_account_name(bank_account_id=bank_account_id, name=name, bank_name=bank_name)
