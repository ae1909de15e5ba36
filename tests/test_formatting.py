import math

from expense_dashboard.formatting import (
    NO_DATE_LABEL,
    category_hue,
    format_currency,
    format_date,
    month_label,
    round_half_up,
    to_number,
)


def test_format_currency_groups_thousands_with_no_break_space():
    assert format_currency(1234) == '1\xa0234 kr'
    assert format_currency(1234567) == '1\xa0234\xa0567 kr'


def test_format_currency_rounds_half_up_to_whole_units():
    assert format_currency(1234.5) == '1\xa0235 kr'
    assert format_currency(99.4) == '99 kr'


def test_format_currency_zero_and_invalid_values():
    assert format_currency(0) == '0 kr'
    assert format_currency(math.nan) == '0 kr'
    assert format_currency(math.inf) == '0 kr'
    assert format_currency(None) == '0 kr'
    assert format_currency('abc') == '0 kr'


def test_format_currency_negative_keeps_sign():
    assert format_currency(-50) == '-50 kr'


def test_format_date_short_form():
    assert format_date('2024-03-05') == '05.03.24'


def test_format_date_missing_or_invalid():
    assert format_date(None) == NO_DATE_LABEL
    assert format_date('') == NO_DATE_LABEL
    assert format_date('not a date') == NO_DATE_LABEL


def test_to_number_coerces_text_and_drops_garbage():
    assert to_number('42') == 42
    assert to_number(' 12.5 ') == 12.5
    assert to_number('abc') == 0
    assert to_number(None) == 0
    assert to_number(True) == 0
    assert to_number(math.nan) == 0
    assert to_number(7) == 7


def test_round_half_up():
    assert round_half_up('199.5') == 200
    assert round_half_up(2.4) == 2
    assert round_half_up('') == 0


def test_month_label():
    assert month_label(1) == 'januar'
    assert month_label(12) == 'desember'
    assert month_label(13) == ''
    assert month_label(None) == ''


def test_category_hue_is_stable_and_case_insensitive():
    assert category_hue('Mat') == category_hue(' mat ')
    assert 0 <= category_hue('transport') < 360
    assert category_hue('') == category_hue('Uncategorized')
