"""Resolve command-line references (ID or name) to entities."""

from pharmledger.domain.bank import BankAccountService
from pharmledger.domain.entities import BankAccount, Batch, Party
from pharmledger.domain.landed_cost import BatchService
from pharmledger.domain.party import PartyService


def _as_id(value: str | int):
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def resolve_party(party_service: PartyService, party: str | int, party_type: str | None = None) -> Party:
    """Resolve a party ID or name.

    Args:
        party_service: PartyService instance
        party: Party name or ID (int or string representation of int)
        party_type: Only match customers or suppliers

    Returns:
        Party entity

    Raises:
        ValueError: If the party is not found
    """
    party_id = _as_id(party)
    if party_id is not None:
        found = party_service.get_party(party_id)
        if found is None or (party_type is not None and found.party_type.value != party_type):
            raise ValueError(f"{(party_type or 'party').capitalize()} ID {party_id} not found")
        return found

    for candidate in party_service.list_parties(party_type=party_type):
        if candidate.name.lower() == str(party).strip().lower():
            return candidate
    raise ValueError(f"{(party_type or 'party').capitalize()} '{party}' not found")


def resolve_bank_account(bank_service: BankAccountService, bank_account: str | int) -> BankAccount:
    """Resolve a bank account ID or name.

    Raises:
        ValueError: If the bank account is not found
    """
    bank_account_id = _as_id(bank_account)
    if bank_account_id is not None:
        found = bank_service.get_bank_account(bank_account_id)
        if found is None:
            raise ValueError(f"Bank account ID {bank_account_id} not found")
        return found

    for candidate in bank_service.list_bank_accounts():
        if candidate.name == bank_account:
            return candidate
    raise ValueError(f"Bank account '{bank_account}' not found")


def resolve_batch(batch_service: BatchService, batch: str | int) -> Batch:
    """Resolve a batch number, falling back to a numeric batch ID.

    Raises:
        ValueError: If the batch is not found
    """
    for candidate in batch_service.list_batches():
        if candidate.batch_number == str(batch).strip():
            return candidate

    batch_id = _as_id(batch)
    if batch_id is not None:
        found = batch_service.get_batch(batch_id)
        if found is not None:
            return found
    raise ValueError(f"Batch '{batch}' not found")
