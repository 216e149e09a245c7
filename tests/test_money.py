from decimal import Decimal

import pytest

from finance_tracker.errors import DataIntegrityError
from finance_tracker.money import format_amount, format_exact, parse_amount, total


def test_parse_amount_accepts_text_and_numbers():
    assert parse_amount('45.50') == Decimal('45.50')
    assert parse_amount(' 12 ') == Decimal('12')
    assert parse_amount(0.1) == Decimal('0.1')
    assert parse_amount(Decimal('3.14')) == Decimal('3.14')


@pytest.mark.parametrize('value', ['abc', '', None, True, 'NaN', 'Infinity'])
def test_parse_amount_rejects_malformed(value):
    with pytest.raises(DataIntegrityError):
        parse_amount(value, field='amount')


def test_format_amount_uses_two_decimals():
    assert format_amount(5) == '5.00'
    assert format_amount('2.675') == '2.68'
    assert format_amount(Decimal('1200')) == '1200.00'


def test_total_sums_stored_text():
    assert total(['1.10', '2.20', 3]) == Decimal('6.30')
    assert total([]) == 0


def test_format_exact_pads_but_never_rounds():
    assert format_exact(60) == '60.00'
    assert format_exact('12.5') == '12.50'
    assert format_exact('33.333') == '33.333'
