"""
Tests for depreciation, end-of-life and document numbering helpers
"""
from datetime import date

import pytest

from helpdesk.business.assets.depreciation import (
    calculate_depreciation,
    classify_refresh,
    days_until_end_of_life,
    end_of_life,
)
from helpdesk.business.core.document_numbers import (
    next_asset_code,
    next_document_number,
    next_stock_opname_code,
)


def test_straight_line_depreciation():
    result = calculate_depreciation(10_000_000, date(2022, 1, 1), 5, today=date(2023, 1, 1))
    assert result.total_depreciation == pytest.approx(2_000_000)
    assert result.current_value == pytest.approx(8_000_000)
    assert result.depreciation_percent == pytest.approx(20.0)


def test_depreciation_is_capped_at_purchase_price():
    result = calculate_depreciation(6_000_000, date(2010, 6, 1), 3, today=date(2024, 6, 1))
    assert result.current_value == 0
    assert result.total_depreciation == 6_000_000
    assert result.depreciation_percent == 100.0


def test_depreciation_without_date_or_price():
    assert calculate_depreciation(5_000_000, None, 5).current_value == 5_000_000
    assert calculate_depreciation(None, date(2020, 1, 1), 5).depreciation_percent == 0.0
    # A purchase date in the future has not depreciated yet
    future = calculate_depreciation(1_000_000, date(2030, 1, 1), 5, today=date(2024, 1, 1))
    assert future.total_depreciation == 0


def test_default_useful_life():
    result = calculate_depreciation(5_000_000, date(2023, 1, 1), None, today=date(2024, 1, 1))
    assert result.total_depreciation == pytest.approx(1_000_000)


def test_end_of_life():
    assert end_of_life(date(2020, 3, 15), 4) == date(2024, 3, 15)
    assert end_of_life(date(2020, 2, 29), 5) == date(2025, 2, 28)
    assert end_of_life(date(2020, 2, 29), 4) == date(2024, 2, 29)
    assert days_until_end_of_life(date(2020, 1, 1), 5, today=date(2024, 12, 31)) == 1


@pytest.mark.parametrize("days, status", [
    (-10, 'expired'), (0, 'expired'), (1, 'critical'), (90, 'critical'),
    (91, 'warning'), (365, 'warning'), (366, 'good'),
])
def test_classify_refresh(days, status):
    assert classify_refresh(days) == status


def test_next_document_number_restarts_each_month():
    today = date(2024, 5, 20)
    assert next_document_number('SBBK', [], today) == 'SBBK-202405-001'
    existing = ['SBBK-202405-001', 'SBBK-202405-009', 'SBBK-202404-015', 'SPB-202405-020', None]
    assert next_document_number('SBBK', existing, today) == 'SBBK-202405-010'


def test_next_asset_code():
    today = date(2024, 2, 1)
    assert next_asset_code('lpt ', [], today) == 'LPT-2024-0001'
    existing = ['LPT-2024-0003', 'LPT-2023-0040', 'LPT-2024-00X1', 'PC-2024-0100']
    assert next_asset_code('LPT', existing, today) == 'LPT-2024-0004'
    assert next_stock_opname_code(['SO-2024-0002'], today) == 'SO-2024-0003'
