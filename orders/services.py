"""
Order settlement.

Placing and cancelling an order touch three tables at once: the order
itself, the wallet ledger and the menu stock. Each operation runs in a
single ``transaction.atomic()`` block so that a failure at any step leaves
none of them changed.
"""
import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from authentication.exceptions import Unavailable, InsufficientStock, InsufficientFunds, InvalidTransition
from campuscanteen.utils import create_with_unique_reference, generate_order_number
from inventory.models import MenuItem
from inventory.services import reserve_stock, restore_stock
from wallet.models import Transaction
from wallet.services import debit_wallet, credit_wallet
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


def _load_lines(items):
    """
    Resolve requested items to menu rows and check availability and stock.

    Quantities for the same item are combined before the stock check.
    """
    requested = OrderedDict()
    for line in items:
        requested.setdefault(line['menu_item_id'], 0)
        requested[line['menu_item_id']] += line['quantity']

    menu_items = MenuItem.objects.in_bulk(list(requested))
    for menu_item_id, quantity in requested.items():
        menu_item = menu_items.get(menu_item_id)
        if menu_item is None:
            raise NotFound(f"Menu item {menu_item_id} not found")
        if not menu_item.is_available:
            raise Unavailable(menu_item.name)
        if menu_item.quantity < quantity:
            raise InsufficientStock(menu_item.name, quantity, menu_item.quantity)

    return menu_items, requested


@transaction.atomic
def place_order(user, items, payment_method, order_type='instant', scheduled_time=None, notes=''):
    """
    Create an order for ``user``.

    ``items`` is a list of dicts with ``menu_item_id``, ``quantity`` and an
    optional ``special_instructions``. Wallet orders are paid immediately.
    """
    menu_items, requested = _load_lines(items)

    total = Decimal('0.00')
    for line in items:
        total += menu_items[line['menu_item_id']].price * line['quantity']

    paid_by_wallet = payment_method == Order.PAYMENT_WALLET
    if paid_by_wallet:
        user.refresh_from_db(fields=['wallet_balance'])
        if user.wallet_balance < total:
            logger.warning(f"Order refused for {user.email}: total {total}, balance {user.wallet_balance}")
            raise InsufficientFunds(required=total, available=user.wallet_balance)

    minutes = settings.CANTEEN['ESTIMATED_PREPARATION_MINUTES']
    order = create_with_unique_reference(
        Order, 'order_number', generate_order_number,
        user=user,
        total_amount=total,
        payment_method=payment_method,
        payment_status=Order.PAYMENT_PAID if paid_by_wallet else Order.PAYMENT_PENDING,
        order_type=order_type or 'instant',
        scheduled_time=scheduled_time,
        estimated_time=timezone.now() + timedelta(minutes=minutes),
        notes=notes or '',
    )

    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            menu_item=menu_items[line['menu_item_id']],
            menu_item_name=menu_items[line['menu_item_id']].name,
            quantity=line['quantity'],
            price=menu_items[line['menu_item_id']].price,
            special_instructions=line.get('special_instructions', ''),
        )
        for line in items
    ])

    if paid_by_wallet:
        debit_wallet(
            user.pk, total, Transaction.CATEGORY_FOOD_PURCHASE,
            f"Order {order.order_number}",
            payment_method=Order.PAYMENT_WALLET,
            order=order,
        )

    for menu_item_id, quantity in requested.items():
        reserve_stock(menu_items[menu_item_id], quantity)

    logger.info(f"Order {order.order_number} placed by {user.email}: {total} via {payment_method}")
    return order


@transaction.atomic
def cancel_order(order_id, user, force=False):
    """
    Cancel an order, refund wallet payments and put the stock back.

    ``force`` lets an admin cancel an order that is already being prepared.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")

    if order.user_id != user.pk and not force:
        raise PermissionDenied("You can only cancel your own orders")

    allowed = order.CANCELLABLE_STATUSES if not force else set(order.TRANSITIONS) - order.TERMINAL_STATUSES
    if order.status not in allowed:
        raise InvalidTransition(order.status, Order.CANCELLED)

    # Guard on the previous status so only one concurrent cancel wins
    updated = Order.objects.filter(pk=order.pk, status=order.status).update(
        status=Order.CANCELLED, updated_at=timezone.now()
    )
    if not updated:
        order.refresh_from_db()
        raise InvalidTransition(order.status, Order.CANCELLED)

    if order.is_wallet_paid:
        credit_wallet(
            order.user_id, order.total_amount, Transaction.CATEGORY_REFUND,
            f"Refund for order {order.order_number}",
            payment_method=Order.PAYMENT_WALLET,
            order=order,
        )
        Order.objects.filter(pk=order.pk).update(payment_status=Order.PAYMENT_REFUNDED)

    for line in order.items.all():
        restore_stock(line.menu_item_id, line.quantity)

    order.refresh_from_db()
    logger.info(f"Order {order.order_number} cancelled by {user.email}")
    return order


@transaction.atomic
def update_order_status(order_id, new_status, admin):
    """
    Admin status change. Forward moves follow the lifecycle; any other move
    out of a non-terminal state is allowed as an override. Cancelling goes
    through ``cancel_order`` so that refunds and stock still happen.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")

    if order.is_terminal or order.status == new_status:
        raise InvalidTransition(order.status, new_status)

    if new_status == Order.CANCELLED:
        return cancel_order(order.pk, admin, force=True)

    if not order.can_transition_to(new_status):
        logger.warning(f"Admin {admin.email} forced order {order.order_number} from {order.status} to {new_status}")

    previous = order.status
    order.status = new_status
    update_fields = ['status', 'updated_at']
    if new_status == Order.COMPLETED:
        order.actual_completion_time = timezone.now()
        update_fields.append('actual_completion_time')
    order.save(update_fields=update_fields)

    logger.info(f"Order {order.order_number} moved from {previous} to {new_status} by {admin.email}")
    return order


def order_stats():
    """Counts by status, today's orders and revenue from non-cancelled orders"""
    today = timezone.localdate()
    by_status = dict(
        Order.objects.values_list('status').annotate(count=Count('id')).order_by('status')
    )
    revenue = Order.objects.exclude(status=Order.CANCELLED).aggregate(total=Sum('total_amount'))['total']
    today_orders = Order.objects.filter(created_at__date=today)
    today_revenue = today_orders.exclude(status=Order.CANCELLED).aggregate(total=Sum('total_amount'))['total']

    return {
        'total_orders': sum(by_status.values()),
        'by_status': by_status,
        'today_orders': today_orders.count(),
        'total_revenue': revenue or Decimal('0.00'),
        'today_revenue': today_revenue or Decimal('0.00'),
    }
