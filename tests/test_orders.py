from decimal import Decimal
from unittest import mock

import pytest

from authentication.exceptions import InsufficientStock, InvalidTransition
from inventory.models import MenuItem
from orders.models import Order
from orders import services
from orders.services import place_order, cancel_order, update_order_status
from wallet.models import Transaction
from wallet.services import replay_balance

pytestmark = pytest.mark.django_db


def order_payload(*lines, payment_method='wallet'):
    return {
        'items': [{'menu_item_id': item.pk, 'quantity': quantity} for item, quantity in lines],
        'payment_method': payment_method,
    }


def test_wallet_order_charges_balance_and_reserves_stock(student_client, student, dosa):
    response = student_client.post('/orders/', order_payload((dosa, 2)), format='json')

    assert response.status_code == 201
    assert Decimal(response.data['total_amount']) == Decimal('120.00')
    assert response.data['payment_status'] == 'paid'
    assert response.data['status'] == 'pending'
    assert response.data['order_number'].startswith('ORD')
    assert response.data['items'][0]['menu_item_name'] == 'Masala Dosa'

    student.refresh_from_db()
    dosa.refresh_from_db()
    assert student.wallet_balance == Decimal('380.00')
    assert dosa.quantity == 28

    debit = Transaction.objects.get(user=student, category=Transaction.CATEGORY_FOOD_PURCHASE)
    assert debit.type == Transaction.TYPE_DEBIT
    assert debit.amount == Decimal('120.00')
    assert debit.balance_after == Decimal('380.00')
    assert debit.order_id == response.data['id']


def test_cancel_restores_balance_and_stock(student_client, student, dosa):
    order_id = student_client.post('/orders/', order_payload((dosa, 2)), format='json').data['id']

    response = student_client.patch(f'/orders/{order_id}/cancel/')

    assert response.status_code == 200
    assert response.data['status'] == 'cancelled'
    assert response.data['payment_status'] == 'refunded'

    student.refresh_from_db()
    dosa.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')
    assert dosa.quantity == 30

    refund = Transaction.objects.get(user=student, category=Transaction.CATEGORY_REFUND)
    assert refund.type == Transaction.TYPE_CREDIT
    assert refund.balance_after == Decimal('500.00')
    assert replay_balance(student) == student.wallet_balance


def test_cash_order_leaves_wallet_alone(student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash')

    student.refresh_from_db()
    assert order.payment_status == Order.PAYMENT_PENDING
    assert student.wallet_balance == Decimal('500.00')
    assert not Transaction.objects.filter(order=order).exists()

    cancel_order(order.pk, student)
    assert not Transaction.objects.filter(category=Transaction.CATEGORY_REFUND).exists()


def test_insufficient_funds_writes_nothing(student_client, student, make_item):
    feast = make_item(name='Mutton Curry', price='150.00', quantity=20, category='dinner')

    response = student_client.post('/orders/', order_payload((feast, 4)), format='json')

    assert response.status_code == 400
    assert response.data['message'] == 'Insufficient wallet balance'
    assert response.data['details']['required'] == '600.00'
    assert response.data['details']['available'] == '500.00'

    student.refresh_from_db()
    feast.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')
    assert feast.quantity == 20
    assert not Order.objects.exists()


def test_insufficient_stock_reports_requested_and_available(student_client, make_item):
    scarce = make_item(name='Poha', price='35.00', quantity=2)

    response = student_client.post('/orders/', order_payload((scarce, 3)), format='json')

    assert response.status_code == 400
    assert response.data['message'] == 'Insufficient stock'
    assert response.data['details']['required'] == '3'
    assert response.data['details']['available'] == '2'
    assert not Order.objects.exists()


def test_duplicate_lines_are_checked_together(student, make_item):
    scarce = make_item(name='Samosa', price='25.00', quantity=3)

    with pytest.raises(InsufficientStock):
        place_order(student, [
            {'menu_item_id': scarce.pk, 'quantity': 2},
            {'menu_item_id': scarce.pk, 'quantity': 2},
        ], 'wallet')

    scarce.refresh_from_db()
    assert scarce.quantity == 3


def test_unavailable_item_is_refused(student_client, make_item):
    off_menu = make_item(name='Lassi', price='35.00', is_available=False)

    response = student_client.post('/orders/', order_payload((off_menu, 1)), format='json')

    assert response.status_code == 400
    assert response.data['message'] == 'Item unavailable'


def test_unknown_item_is_not_found(student_client):
    response = student_client.post('/orders/', {
        'items': [{'menu_item_id': 9999, 'quantity': 1}], 'payment_method': 'wallet',
    }, format='json')

    assert response.status_code == 404


def test_item_quantity_limit(student_client, dosa):
    response = student_client.post('/orders/', order_payload((dosa, 11)), format='json')

    assert response.status_code == 400
    assert 'items' in response.data['details']


def test_failure_after_debit_rolls_everything_back(student, dosa, biryani):
    refused = InsufficientStock(biryani.name, 1, 0)
    with mock.patch('orders.services.reserve_stock', side_effect=refused):
        with pytest.raises(InsufficientStock):
            place_order(student, [
                {'menu_item_id': dosa.pk, 'quantity': 1},
                {'menu_item_id': biryani.pk, 'quantity': 1},
            ], 'wallet')

    student.refresh_from_db()
    dosa.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')
    assert dosa.quantity == 30
    assert not Order.objects.exists()
    assert not Transaction.objects.filter(category=Transaction.CATEGORY_FOOD_PURCHASE).exists()


def test_stock_sold_out_after_validation_is_refused(student, dosa):
    load_lines = services._load_lines

    def load_then_sell_out(items):
        loaded = load_lines(items)
        MenuItem.objects.filter(pk=dosa.pk).update(quantity=1)
        return loaded

    with mock.patch('orders.services._load_lines', side_effect=load_then_sell_out):
        with pytest.raises(InsufficientStock):
            place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 3}], 'wallet')

    student.refresh_from_db()
    dosa.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')
    assert dosa.quantity == 30
    assert not Order.objects.exists()
    assert not Transaction.objects.filter(category=Transaction.CATEGORY_FOOD_PURCHASE).exists()


def test_total_is_snapshotted(student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 2}], 'wallet')

    dosa.price = Decimal('80.00')
    dosa.save()

    order.refresh_from_db()
    assert order.total_amount == Decimal('120.00')
    assert order.items.get().price == Decimal('60.00')


def test_estimated_time_is_twenty_minutes_out(student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash')

    delta = order.estimated_time - order.created_at
    assert 19 * 60 <= delta.total_seconds() <= 21 * 60


def test_order_number_collision_is_regenerated(student, dosa):
    taken = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash').order_number

    with mock.patch('orders.services.generate_order_number', side_effect=[taken, 'ORD20260101ZZ99']):
        order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash')

    assert order.order_number == 'ORD20260101ZZ99'


def test_cannot_cancel_someone_elses_order(student, other_student, dosa, api_client):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    api_client.force_authenticate(user=other_student)

    response = api_client.patch(f'/orders/{order.pk}/cancel/')

    assert response.status_code == 403
    order.refresh_from_db()
    assert order.status == Order.PENDING


def test_owner_cannot_cancel_once_preparing(student, admin_user, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    update_order_status(order.pk, Order.CONFIRMED, admin_user)
    update_order_status(order.pk, Order.PREPARING, admin_user)

    with pytest.raises(InvalidTransition):
        cancel_order(order.pk, student)


def test_second_cancel_does_not_refund_twice(student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    cancel_order(order.pk, student)

    with pytest.raises(InvalidTransition):
        cancel_order(order.pk, student)

    student.refresh_from_db()
    assert student.wallet_balance == Decimal('500.00')
    assert Transaction.objects.filter(category=Transaction.CATEGORY_REFUND).count() == 1


def test_admin_walks_order_to_completion(admin_client, student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')

    for next_status in ['confirmed', 'preparing', 'ready', 'completed']:
        response = admin_client.patch(f'/orders/{order.pk}/status/', {'status': next_status}, format='json')
        assert response.status_code == 200
        assert response.data['status'] == next_status

    order.refresh_from_db()
    assert order.actual_completion_time is not None


def test_terminal_orders_do_not_move(admin_client, student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    cancel_order(order.pk, student)

    response = admin_client.patch(f'/orders/{order.pk}/status/', {'status': 'confirmed'}, format='json')

    assert response.status_code == 400
    assert response.data['details']['current_status'] == 'cancelled'


def test_admin_cancel_while_preparing_refunds(admin_user, student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 2}], 'wallet')
    update_order_status(order.pk, Order.CONFIRMED, admin_user)
    update_order_status(order.pk, Order.PREPARING, admin_user)

    order = update_order_status(order.pk, Order.CANCELLED, admin_user)

    student.refresh_from_db()
    dosa.refresh_from_db()
    assert order.status == Order.CANCELLED
    assert student.wallet_balance == Decimal('500.00')
    assert dosa.quantity == 30


def test_cancel_skips_deleted_menu_items(student, dosa, biryani):
    order = place_order(student, [
        {'menu_item_id': dosa.pk, 'quantity': 1},
        {'menu_item_id': biryani.pk, 'quantity': 1},
    ], 'wallet')
    biryani.delete()

    cancel_order(order.pk, student)

    dosa.refresh_from_db()
    student.refresh_from_db()
    assert dosa.quantity == 30
    assert student.wallet_balance == Decimal('500.00')
    assert order.items.filter(menu_item__isnull=True).get().menu_item_name == 'Chicken Biryani'


def test_students_only_see_their_orders(student_client, student, other_student, dosa):
    place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash')
    theirs = place_order(other_student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'cash')

    listing = student_client.get('/orders/my-orders/')
    assert listing.status_code == 200
    assert listing.data['count'] == 1

    detail = student_client.get(f'/orders/{theirs.pk}/')
    assert detail.status_code == 403


def test_admin_order_list_and_stats(admin_client, student_client, student, dosa):
    place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    cancelled = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
    cancel_order(cancelled.pk, student)

    listing = admin_client.get('/orders/admin/all/', {'status': 'pending'})
    assert listing.data['count'] == 1

    stats = admin_client.get('/orders/admin/stats/')
    assert stats.data['total_orders'] == 2
    assert stats.data['total_revenue'] == Decimal('60.00')

    assert student_client.get('/orders/admin/all/').status_code == 403
