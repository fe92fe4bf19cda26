"""Chart of accounts domain service."""

import logging
from typing import Optional, Any

from pharmledger.database.base import Database
from pharmledger.domain.entities import (
    Account,
    AccountTreeNode,
    AccountType,
    NormalBalance,
)
from pharmledger.domain.errors import (
    ValidationError,
    NotFoundError,
    ReferentialIntegrityError,
    account_not_found,
    account_code_not_found,
    account_delete_blocked,
)

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = {
    "code",
    "name",
    "name_local",
    "account_group",
    "description",
    "parent_id",
    "is_header",
    "account_type",
    "normal_balance",
}


def _account_type(value: Any) -> AccountType:
    try:
        return AccountType(value)
    except ValueError as e:
        choices = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}' (expected one of: {choices})") from e


def _normal_balance(value: Any) -> NormalBalance:
    if value is None or value == "":
        raise ValidationError("Normal balance is required (debit or credit)")
    try:
        return NormalBalance(value)
    except ValueError as e:
        raise ValidationError(f"Invalid normal balance '{value}' (expected debit or credit)") from e


class ChartOfAccountsService:
    """Service for the hierarchical chart of accounts."""

    def __init__(self, db: Database):
        """Initialize chart of accounts service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_parent(self, parent_id: Optional[int], account_id: Optional[int] = None) -> None:
        if parent_id is None:
            return
        parent = self.db.get_account(parent_id)
        if parent is None:
            raise ValidationError(f"Parent account {parent_id} not found")
        if not parent.is_header:
            raise ValidationError(f"Parent account {parent.code} is not a header account")

        if account_id is None:
            return
        # Walk up from the new parent; meeting the account itself means a cycle
        current: Optional[Account] = parent
        while current is not None:
            if current.id == account_id:
                raise ValidationError(f"Account {account_id} cannot be moved under its own descendant")
            current = self.db.get_account(current.parent_id) if current.parent_id is not None else None

    def create_account(
        self,
        code: str,
        name: str,
        account_type: Any,
        normal_balance: Any,
        name_local: Optional[str] = None,
        account_group: Optional[str] = None,
        parent_id: Optional[int] = None,
        is_header: bool = False,
        description: Optional[str] = None,
    ) -> Account:
        """Create an account.

        Args:
            code: Unique account code (e.g. "1110")
            name: Display name
            account_type: asset, liability, equity, revenue, expense or contra
            normal_balance: debit or credit
            name_local: Localized display name
            account_group: Reporting group label (e.g. "Current Assets")
            parent_id: Header account to nest under
            is_header: Whether the account only groups children
            description: Free-text description

        Returns:
            Created account

        Raises:
            ValidationError: If the code is empty or taken, the type or normal
                balance is invalid, or the parent is not a header account
        """
        code = (code or "").strip()
        if not code:
            raise ValidationError("Account code is required")
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        acc_type = _account_type(account_type)
        balance_side = _normal_balance(normal_balance)

        if self.db.get_account_by_code(code) is not None:
            raise ValidationError(f"Account code '{code}' already exists")
        self._validate_parent(parent_id)

        account_id = self.db.create_account(
            code=code,
            name=name.strip(),
            account_type=acc_type.value,
            normal_balance=balance_side.value,
            name_local=name_local,
            account_group=account_group,
            parent_id=parent_id,
            is_header=is_header,
            description=description,
        )
        logger.info("Created account %s %s (id=%s)", code, name, account_id)
        return self.db.get_account(account_id)

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def resolve(self, code: str) -> Account:
        """Look up an account by code.

        Raises:
            ValidationError: If no account has this code
        """
        account = self.db.get_account_by_code(code.strip()) if code else None
        if account is None:
            raise ValidationError(account_code_not_found(code))
        return account

    def list_accounts(self, include_inactive: bool = True) -> list[Account]:
        """List accounts ordered by code."""
        accounts = self.db.list_accounts()
        if include_inactive:
            return accounts
        return [acc for acc in accounts if acc.is_active]

    def children(self, parent_id: Optional[int]) -> list[Account]:
        """Direct children of an account, or root accounts when parent_id is None."""
        if parent_id is None:
            return self.db.list_accounts(roots_only=True)
        return self.db.list_accounts(parent_id=parent_id)

    def account_tree(self) -> list[AccountTreeNode]:
        """Get the full account hierarchy.

        Returns:
            Root nodes with nested children, each level ordered by code
        """

        def build(account: Account) -> AccountTreeNode:
            return AccountTreeNode(
                account=account,
                children=tuple(build(child) for child in self.children(account.id)),
            )

        return [build(root) for root in self.children(None)]

    def update_account(self, account_id: int, **patch: Any) -> Account:
        """Update account fields.

        Args:
            account_id: Account to update
            **patch: Any of code, name, name_local, account_group, description,
                parent_id, is_header, account_type, normal_balance

        Returns:
            Updated account

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a value is invalid
            ReferentialIntegrityError: If the change would reclassify an
                account that already has posted lines
        """
        account = self.require_account(account_id)

        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update account field(s): {', '.join(sorted(unknown))}")

        fields: dict[str, Any] = {}
        if "code" in patch:
            code = (patch["code"] or "").strip()
            if not code:
                raise ValidationError("Account code is required")
            existing = self.db.get_account_by_code(code)
            if existing is not None and existing.id != account_id:
                raise ValidationError(f"Account code '{code}' already exists")
            fields["code"] = code
        if "name" in patch:
            if not patch["name"] or not patch["name"].strip():
                raise ValidationError("Account name is required")
            fields["name"] = patch["name"].strip()
        for key in ("name_local", "account_group", "description"):
            if key in patch:
                fields[key] = patch[key]
        if "account_type" in patch:
            fields["account_type"] = _account_type(patch["account_type"]).value
        if "normal_balance" in patch:
            fields["normal_balance"] = _normal_balance(patch["normal_balance"]).value
        if "is_header" in patch:
            fields["is_header"] = bool(patch["is_header"])
        if "parent_id" in patch:
            if patch["parent_id"] == account_id:
                raise ValidationError("An account cannot be its own parent")
            self._validate_parent(patch["parent_id"], account_id=account_id)
            fields["parent_id"] = patch["parent_id"]

        reclassifies = (
            (fields.get("is_header", account.is_header) and not account.is_header)
            or fields.get("account_type", account.account_type.value) != account.account_type.value
            or fields.get("normal_balance", account.normal_balance.value) != account.normal_balance.value
        )
        if reclassifies:
            line_count = self.db.get_account_line_count(account_id)
            if line_count > 0:
                logger.warning("Refused to reclassify account %s with %d posted lines", account.code, line_count)
                raise ReferentialIntegrityError(
                    f"Cannot change type, normal balance or header flag of account {account.code}: "
                    f"it has {line_count} posted journal line{'s' if line_count != 1 else ''}"
                )

        if fields:
            self.db.update_account(account_id, fields)
            logger.info("Updated account %s: %s", account.code, ", ".join(sorted(fields)))
        return self.db.get_account(account_id)

    def deactivate(self, account_id: int) -> Account:
        """Soft-remove an account; it keeps its history but rejects new lines."""
        account = self.require_account(account_id)
        if account.is_active:
            self.db.update_account(account_id, {"is_active": False})
            logger.info("Deactivated account %s", account.code)
        return self.db.get_account(account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account that has never been posted to.

        Raises:
            NotFoundError: If the account does not exist
            ReferentialIntegrityError: If the account has posted journal lines
                or child accounts
        """
        account = self.require_account(account_id)

        line_count = self.db.get_account_line_count(account_id)
        child_count = len(self.db.list_accounts(parent_id=account_id))
        if line_count > 0 or child_count > 0:
            logger.warning("Refused to delete account %s", account.code)
            raise ReferentialIntegrityError(account_delete_blocked(account_id, line_count, child_count))

        self.db.delete_account(account_id)
        logger.info("Deleted account %s", account.code)

    def ensure_postable(self, account: Account) -> Account:
        """Reject header and inactive accounts as journal line targets.

        Raises:
            ValidationError: If the account cannot be posted to
        """
        if account.is_header:
            raise ValidationError(f"Account {account.code} is a header account and cannot be posted to")
        if not account.is_active:
            raise ValidationError(f"Account {account.code} is inactive and cannot be posted to")
        return account
