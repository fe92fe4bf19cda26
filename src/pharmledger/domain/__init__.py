"""Domain layer for pharmledger."""

_SERVICES = {
    "ChartOfAccountsService": "pharmledger.domain.chart",
    "PartyService": "pharmledger.domain.party",
    "BankAccountService": "pharmledger.domain.bank",
    "BatchService": "pharmledger.domain.landed_cost",
    "JournalService": "pharmledger.domain.journal",
    "LedgerService": "pharmledger.domain.ledger",
    "ReportService": "pharmledger.domain.reports",
    "TaxService": "pharmledger.domain.tax",
    "AgeingService": "pharmledger.domain.ageing",
}

__all__ = list(_SERVICES)


# Services import the database layer, which imports domain entities, so they
# are loaded lazily
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
