"""Utility functions for parkledger."""

from parkledger.utils.date_parser import parse_date
from parkledger.utils.amount_parser import parse_amount
from parkledger.utils.period import parse_period, period_of

__all__ = ["parse_date", "parse_amount", "parse_period", "period_of"]
