from decimal import Decimal

import pytest

from authentication.exceptions import InsufficientFunds, Conflict
from campuscanteen.utils import create_with_unique_reference
from orders.services import place_order, cancel_order
from wallet.models import Transaction
from wallet.services import adjust_wallet, replay_balance, verify_ledger, debit_wallet

pytestmark = pytest.mark.django_db


def test_balance(student_client):
    response = student_client.get('/wallet/balance/')

    assert response.status_code == 200
    assert response.data['balance'] == Decimal('500.00')


def test_recharge_appends_credit(student_client, student):
    response = student_client.post('/wallet/recharge/', {'amount': '200', 'payment_method': 'upi'}, format='json')

    assert response.status_code == 200
    assert response.data['new_balance'] == Decimal('700.00')

    txn = Transaction.objects.get(user=student, category=Transaction.CATEGORY_RECHARGE)
    assert txn.type == Transaction.TYPE_CREDIT
    assert txn.amount == Decimal('200.00')
    assert txn.balance_after == Decimal('700.00')
    assert txn.payment_method == 'upi'
    assert txn.transaction_id.startswith('TXN')
    assert len(txn.transaction_id) == 21


@pytest.mark.parametrize('amount', ['5', '5000.01'])
def test_recharge_bounds(student_client, student, amount):
    response = student_client.post('/wallet/recharge/', {'amount': amount, 'payment_method': 'card'}, format='json')

    assert response.status_code == 400
    student.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')


def test_recharge_rejects_wallet_as_method(student_client):
    response = student_client.post('/wallet/recharge/', {'amount': '100', 'payment_method': 'wallet'}, format='json')

    assert response.status_code == 400


def test_admin_debit_beyond_balance_is_refused(admin_client, admin_user, student):
    adjust_wallet(admin_user, student.pk, Decimal('450'), Transaction.TYPE_DEBIT, "Correction")
    before = Transaction.objects.count()

    response = admin_client.post('/wallet/admin/adjust/', {
        'user_id': str(student.pk), 'amount': '100', 'type': 'debit', 'reason': 'Duplicate recharge',
    }, format='json')

    assert response.status_code == 400
    assert response.data['message'] == 'Insufficient wallet balance'
    student.refresh_from_db()
    assert student.wallet_balance == Decimal('50.00')
    assert Transaction.objects.count() == before


def test_admin_credit_adjustment(admin_client, admin_user, student):
    response = admin_client.post('/wallet/admin/adjust/', {
        'user_id': str(student.pk), 'amount': '-25', 'type': 'credit', 'reason': 'Goodwill',
    }, format='json')

    assert response.status_code == 200
    txn = Transaction.objects.get(pk=response.data['transaction']['id'])
    assert txn.amount == Decimal('25.00')
    assert txn.description == 'Admin adjustment: Goodwill'
    assert txn.payment_method == 'admin-adjustment'
    assert txn.performed_by == admin_user
    assert txn.balance_after == Decimal('525.00')


@pytest.mark.parametrize('payload', [
    {'amount': '0', 'type': 'credit', 'reason': 'x'},
    {'amount': '10001', 'type': 'credit', 'reason': 'x'},
    {'amount': '10', 'type': 'credit', 'reason': ''},
    {'amount': '10', 'type': 'bonus', 'reason': 'x'},
])
def test_adjustment_validation(admin_client, student, payload):
    response = admin_client.post('/wallet/admin/adjust/', dict(payload, user_id=str(student.pk)), format='json')

    assert response.status_code == 400


def test_adjust_requires_admin(student_client, student):
    response = student_client.post('/wallet/admin/adjust/', {
        'user_id': str(student.pk), 'amount': '100', 'type': 'credit', 'reason': 'Free money',
    }, format='json')

    assert response.status_code == 403


def test_debit_never_goes_negative(student):
    with pytest.raises(InsufficientFunds):
        debit_wallet(student.pk, Decimal('500.01'), Transaction.CATEGORY_ADJUSTMENT, "Too much")

    student.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')


def test_ledger_replays_to_balance(admin_user, student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 3}], 'wallet')
    place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    cancel_order(order.pk, student)
    adjust_wallet(admin_user, student.pk, Decimal('40'), Transaction.TYPE_DEBIT, "Broken plate")

    student.refresh_from_db()
    assert student.wallet_balance == Decimal('400.00')
    assert replay_balance(student) == student.wallet_balance

    report = verify_ledger(student)
    assert report['consistent'] is True
    assert report['broken_links'] == []
    assert report['transactions'] == 5


def test_ledger_check_flags_out_of_band_balance_change(admin_client, student):
    type(student).objects.filter(pk=student.pk).update(wallet_balance=Decimal('999.00'))

    response = admin_client.get(f'/wallet/admin/ledger/{student.pk}/')

    assert response.status_code == 200
    assert response.data['consistent'] is False
    assert response.data['replayed_balance'] == '500.00'


def test_ledger_entries_are_immutable(student):
    txn = Transaction.objects.filter(user=student).first()

    txn.amount = Decimal('1.00')
    with pytest.raises(ValueError):
        txn.save()
    with pytest.raises(ValueError):
        txn.delete()


def test_transaction_history_is_scoped_and_filtered(student_client, student, other_student):
    student_client.post('/wallet/recharge/', {'amount': '100', 'payment_method': 'card'}, format='json')

    response = student_client.get('/wallet/transactions/', {'category': 'recharge'})
    assert response.data['count'] == 1

    response = student_client.get('/wallet/transactions/')
    assert response.data['count'] == 2
    assert {row['user'] for row in response.data['results']} == {student.pk}

    theirs = Transaction.objects.filter(user=other_student).first()
    assert student_client.get(f'/wallet/transactions/{theirs.pk}/').status_code == 403


def test_wallet_stats(student_client, student, dosa):
    place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 2}], 'wallet')

    response = student_client.get('/wallet/stats/', {'period': 7})

    assert response.status_code == 200
    summary = {row['type']: row for row in response.data['summary']}
    assert summary['debit']['total_amount'] == Decimal('120.00')
    assert response.data['monthly_spending'][0]['order_count'] == 1


def test_admin_wallet_views(admin_client, student, other_student):
    listing = admin_client.get('/wallet/admin/transactions/', {'user': str(student.pk)})
    assert listing.data['count'] == 1

    stats = admin_client.get('/wallet/admin/stats/')
    assert stats.status_code == 200
    assert stats.data['total_wallet_balance'] == Decimal('800.00')


def test_exhausted_reference_retries_raise_conflict(student):
    taken = Transaction.objects.filter(user=student).first().transaction_id

    with pytest.raises(Conflict):
        create_with_unique_reference(
            Transaction, 'transaction_id', lambda: taken,
            user=student, type='credit', amount=Decimal('1'), category='adjustment',
            description='never written', balance_after=Decimal('501'),
        )
