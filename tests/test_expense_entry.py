from conftest import OWNER

from expense_dashboard.expense_entry import (
    INVALID_PRICE_MESSAGE,
    REQUIRED_FIELDS_MESSAGE,
    ExpenseForm,
    submit_expense,
)


def test_validate_requires_item_and_category():
    assert ExpenseForm(item='', price='10', category_id=1).validate() == REQUIRED_FIELDS_MESSAGE
    assert ExpenseForm(item='Øl', price='10', category_id=None).validate() == REQUIRED_FIELDS_MESSAGE


def test_validate_rejects_bad_price():
    assert ExpenseForm(item='Øl', price='abc', category_id=1).validate() == INVALID_PRICE_MESSAGE
    assert ExpenseForm(item='Øl', price='', category_id=1).validate() == INVALID_PRICE_MESSAGE
    assert ExpenseForm(item='Øl', price='89', category_id=1).validate() is None


def test_payload_rounds_price_and_blanks_optional_fields():
    form = ExpenseForm(item='  Øl ', price='199.5', category_id='1', tag=' ', date='')
    assert form.to_payload() == {
        'item': 'Øl',
        'price': 200,
        'category_id': 1,
        'tag': None,
        'date': None,
    }


def test_reset_keeps_category():
    form = ExpenseForm(item='Øl', price='89', category_id=3, tag='Tanzania')
    fresh = form.reset()
    assert fresh.category_id == 3
    assert fresh.item == ''
    assert fresh.tag == ''


def test_submit_invalid_form_skips_store(gateway, fake_client):
    result = submit_expense(gateway, OWNER, ExpenseForm(item='Øl', price='x', category_id=1))
    assert result.message == INVALID_PRICE_MESSAGE
    assert fake_client.calls == []


def test_submit_inserts_expense(gateway, fake_client):
    form = ExpenseForm(item='Øl', price='89', category_id=1, tag='Tanzania', date='2024-03-20')
    result = submit_expense(gateway, OWNER, form)
    assert result.ok
    saved = fake_client.tables['expense'][-1]
    assert (saved['item'], saved['price'], saved['user_id'], saved['date']) == ('Øl', 89, OWNER, '2024-03-20')
