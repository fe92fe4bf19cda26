"""Utility functions for pharmledger."""

from pharmledger.utils.date_parser import parse_date, parse_month
from pharmledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_month", "parse_amount"]
