"""Ledger settings loaded from the environment."""

import os
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from pharmledger.domain.errors import ValidationError

ENV_PREFIX = "PHARMLEDGER_"


@dataclass(frozen=True)
class PostingAccounts:
    """Account codes the posting rules debit and credit by role."""

    cash: str = "1110"
    receivable: str = "1200"
    inventory: str = "1300"
    input_tax: str = "1400"
    payable: str = "2100"
    output_tax: str = "2200"
    sales: str = "4100"
    bank_charges: str = "6200"


@dataclass(frozen=True)
class LedgerSettings:
    base_currency: str = "IDR"
    ppn_rate: Decimal = Decimal("0.11")
    posting_accounts: PostingAccounts = field(default_factory=PostingAccounts)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> LedgerSettings:
    """Build settings from PHARMLEDGER_* environment variables.

    Recognized variables:
        PHARMLEDGER_BASE_CURRENCY: ISO code of the ledger currency
        PHARMLEDGER_PPN_RATE: VAT rate as a fraction (e.g. 0.11)
        PHARMLEDGER_<ROLE>_ACCOUNT: account code for a posting role,
            e.g. PHARMLEDGER_INVENTORY_ACCOUNT=1310

    Raises:
        ValidationError: If a value is malformed
    """
    if environ is None:
        environ = os.environ

    settings = LedgerSettings()

    base_currency = environ.get(f"{ENV_PREFIX}BASE_CURRENCY")
    if base_currency:
        settings = replace(settings, base_currency=base_currency.strip().upper())

    ppn_rate = environ.get(f"{ENV_PREFIX}PPN_RATE")
    if ppn_rate:
        try:
            rate = Decimal(ppn_rate.strip())
        except InvalidOperation as e:
            raise ValidationError(f"Invalid {ENV_PREFIX}PPN_RATE '{ppn_rate}'") from e
        if rate < 0 or rate >= 1:
            raise ValidationError(f"{ENV_PREFIX}PPN_RATE must be a fraction between 0 and 1")
        settings = replace(settings, ppn_rate=rate)

    overrides = {}
    for role in fields(PostingAccounts):
        code = environ.get(f"{ENV_PREFIX}{role.name.upper()}_ACCOUNT")
        if code is not None:
            if not code.strip():
                raise ValidationError(f"{ENV_PREFIX}{role.name.upper()}_ACCOUNT is empty")
            overrides[role.name] = code.strip()
    if overrides:
        settings = replace(settings, posting_accounts=replace(settings.posting_accounts, **overrides))

    return settings
