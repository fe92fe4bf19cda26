"""SQLAlchemy models for pharmledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(18, 2)
RATE = Numeric(18, 6)
QUANTITY = Numeric(18, 3)


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    name_local = Column(String, nullable=True)
    account_type = Column(String, nullable=False)
    account_group = Column(String, nullable=True)
    parent_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    is_header = Column(Boolean, default=False, nullable=False)
    normal_balance = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    parent = relationship("Account", remote_side=[id], backref="children")
    lines = relationship("JournalLine", back_populates="account")


class Party(Base):
    """Customer or supplier model."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    party_type = Column(String, nullable=False)
    tax_id = Column(String, nullable=True)
    is_pkp = Column(Boolean, default=False, nullable=False)
    currency = Column(String, default="IDR", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("party_type", "name", name="uq_party_type_name"),)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    bank_name = Column(String, nullable=False)
    account_number = Column(String, nullable=True)
    ledger_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    currency = Column(String, default="IDR", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    ledger_account = relationship("Account")


class Batch(Base):
    """Imported inventory batch with landed-cost fields."""

    __tablename__ = "batches"

    id = Column(Integer, primary_key=True)
    batch_number = Column(String, unique=True, nullable=False)
    product_name = Column(String, nullable=True)
    supplier_id = Column(Integer, ForeignKey("parties.id"), nullable=True)
    import_date = Column(Date, nullable=False)
    import_quantity = Column(QUANTITY, nullable=False)
    sold_quantity = Column(QUANTITY, default=0, nullable=False)
    currency = Column(String, default="USD", nullable=False)
    import_price_usd = Column(MONEY, nullable=False)
    exchange_rate = Column(RATE, nullable=True)
    duty_percent = Column(Numeric(9, 4), default=0, nullable=False)
    freight_amount = Column(Numeric(18, 4), default=0, nullable=False)
    freight_type = Column(String, default="fixed", nullable=False)
    other_amount = Column(Numeric(18, 4), default=0, nullable=False)
    other_type = Column(String, default="fixed", nullable=False)
    cost_locked = Column(Boolean, default=False, nullable=False)
    final_landed_cost = Column(MONEY, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class PurchaseInvoice(Base):
    """Posted purchase invoice, amounts in base currency."""

    __tablename__ = "purchase_invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String, unique=True, nullable=False)
    supplier_id = Column(Integer, ForeignKey("parties.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    item_type = Column(String, nullable=False)
    subtotal = Column(MONEY, nullable=False)
    tax_amount = Column(MONEY, default=0, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    is_import = Column(Boolean, default=False, nullable=False)
    faktur_pajak_number = Column(String, nullable=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)


class SalesInvoice(Base):
    """Posted sales invoice."""

    __tablename__ = "sales_invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String, unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("parties.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    subtotal = Column(MONEY, nullable=False)
    tax_amount = Column(MONEY, default=0, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    faktur_pajak_number = Column(String, nullable=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)


class JournalEntry(Base):
    """Journal entry header. Rows are append-only."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    entry_date = Column(Date, nullable=False)
    source_type = Column(String, nullable=False)
    source_id = Column(String, nullable=True)
    description = Column(String, nullable=True)
    reverses_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True, unique=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )


class JournalLine(Base):
    """Journal line model."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=True)
    sales_invoice_id = Column(Integer, ForeignKey("sales_invoices.id"), nullable=True)
    debit = Column(MONEY, default=0, nullable=False)
    credit = Column(MONEY, default=0, nullable=False)
    memo = Column(String, nullable=True)

    __table_args__ = (UniqueConstraint("journal_entry_id", "line_number", name="uq_entry_line_number"),)

    # Relationships
    entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account", back_populates="lines")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
