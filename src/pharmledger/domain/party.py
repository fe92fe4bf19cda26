"""Customer and supplier domain service."""

import logging
from typing import Optional, Any

from pharmledger.database.base import Database
from pharmledger.domain.entities import Party, PartyType
from pharmledger.domain.errors import ValidationError, NotFoundError, party_not_found

logger = logging.getLogger(__name__)


def parse_party_type(value: Any) -> PartyType:
    try:
        return PartyType(value)
    except ValueError as e:
        raise ValidationError(f"Invalid party type '{value}' (expected customer or supplier)") from e


class PartyService:
    """Service for managing customers and suppliers."""

    def __init__(self, db: Database):
        """Initialize party service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_party(
        self,
        name: str,
        party_type: Any,
        tax_id: Optional[str] = None,
        is_pkp: bool = False,
        currency: str = "IDR",
    ) -> Party:
        """Create a customer or supplier.

        Args:
            name: Display name, unique within its party type
            party_type: customer or supplier
            tax_id: Tax registration number (NPWP)
            is_pkp: Whether the party is a VAT-registered business
            currency: Default trading currency

        Returns:
            Created party

        Raises:
            ValidationError: If the name is empty or already used for this type
        """
        kind = parse_party_type(party_type)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Party name is required")

        for existing in self.db.list_parties(party_type=kind.value):
            if existing.name.lower() == name.lower():
                raise ValidationError(f"{kind.value.capitalize()} with name '{name}' already exists")

        party_id = self.db.create_party(
            name=name,
            party_type=kind.value,
            tax_id=tax_id,
            is_pkp=is_pkp,
            currency=(currency or "IDR").upper(),
        )
        logger.info("Created %s %s (id=%s)", kind.value, name, party_id)
        return self.db.get_party(party_id)

    def get_party(self, party_id: int) -> Optional[Party]:
        """Get party by ID."""
        return self.db.get_party(party_id)

    def require_party(self, party_id: int) -> Party:
        """Get party by ID.

        Raises:
            NotFoundError: If the party does not exist
        """
        party = self.db.get_party(party_id)
        if party is None:
            raise NotFoundError(party_not_found(party_id))
        return party

    def list_parties(self, party_type: Any = None) -> list[Party]:
        """List parties ordered by name, optionally only customers or suppliers."""
        if party_type is None:
            return self.db.list_parties()
        return self.db.list_parties(party_type=parse_party_type(party_type).value)
