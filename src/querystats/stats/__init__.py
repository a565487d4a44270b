"""Decode statement statistics rows."""

from .decoder import UNKNOWN, decode_row
from .models import STATEMENT_COLUMNS, StatementRecord

__all__ = ["UNKNOWN", "decode_row", "STATEMENT_COLUMNS", "StatementRecord"]
