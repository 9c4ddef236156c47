"""
Sequential document and asset-code numbering

Numbers are derived by reading the highest existing number for the period
and adding one. Two writers generating at the same moment can collide; the
unique constraints on the columns reject the second one.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional


def _max_suffix(existing: Iterable[Optional[str]], prefix: str) -> int:
    highest = 0
    for number in existing:
        if not number or not number.startswith(prefix):
            continue
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_document_number(doc_type: str, existing: Iterable[Optional[str]], today: date) -> str:
    """
    Next document number of the month, e.g. SBBK-202405-007.

    Args:
        doc_type: Document prefix (SBBK, SPB)
        existing: Document numbers already issued (any month)
        today: Date that selects the month

    Returns:
        str: "{TYPE}-{YYYYMM}-{NNN}"
    """
    prefix = f"{doc_type}-{today.strftime('%Y%m')}-"
    return f"{prefix}{_max_suffix(existing, prefix) + 1:03d}"


def next_asset_code(category_prefix: str, existing: Iterable[Optional[str]], today: date) -> str:
    """
    Next asset code of the year for a category, e.g. LPT-2024-0012.

    Args:
        category_prefix: Category prefix, upper-cased
        existing: Asset codes already issued
        today: Date that selects the year

    Returns:
        str: "{PREFIX}-{YYYY}-{NNNN}"
    """
    prefix = f"{category_prefix.strip().upper()}-{today.year}-"
    return f"{prefix}{_max_suffix(existing, prefix) + 1:04d}"


def next_stock_opname_code(existing: Iterable[Optional[str]], today: date) -> str:
    """Next stock opname session code of the year, e.g. SO-2024-0003"""
    return next_asset_code('SO', existing, today)
