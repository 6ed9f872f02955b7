import logging

from django.db import transaction, IntegrityError
from django.db.models import Avg, Count
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from authentication.exceptions import Conflict
from inventory.models import MenuItem
from orders.models import Order
from .models import Feedback

logger = logging.getLogger(__name__)


def update_menu_item_rating(menu_item_id):
    """
    Recompute ``rating_average`` and ``rating_count`` of a menu item from
    its active feedback. With no active feedback both go back to zero.
    """
    stats = Feedback.objects.filter(
        menu_item_id=menu_item_id, status=Feedback.STATUS_ACTIVE
    ).aggregate(average=Avg('rating'), count=Count('id'))

    average = round(stats['average'], 1) if stats['average'] is not None else 0
    MenuItem.objects.filter(pk=menu_item_id).update(rating_average=average, rating_count=stats['count'])
    return average, stats['count']


def _mark_order_rated(order):
    rated = Feedback.objects.filter(order=order).values('menu_item').distinct().count()
    ordered = order.items.exclude(menu_item__isnull=True).values('menu_item').distinct().count()
    if ordered and rated >= ordered and not order.is_rated:
        Order.objects.filter(pk=order.pk).update(is_rated=True)


@transaction.atomic
def submit_feedback(user, order_id, menu_item_id, **fields):
    """Rate one item of one of the user's completed orders"""
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")
    if order.user_id != user.pk:
        raise PermissionDenied("Not authorized to rate this order")
    if order.status != Order.COMPLETED:
        raise ValidationError({'order_id': "Can only rate completed orders"})
    if not order.items.filter(menu_item_id=menu_item_id).exists():
        raise ValidationError({'menu_item_id': "Menu item not found in this order"})

    if Feedback.objects.filter(user=user, order=order, menu_item_id=menu_item_id).exists():
        raise Conflict("Feedback already submitted for this item")

    try:
        with transaction.atomic():
            feedback = Feedback.objects.create(user=user, order=order, menu_item_id=menu_item_id, **fields)
    except IntegrityError:
        raise Conflict("Feedback already submitted for this item")

    update_menu_item_rating(menu_item_id)
    _mark_order_rated(order)

    logger.info(f"Feedback {feedback.pk} on {order.order_number} by {user.email}: {feedback.rating}/5")
    return feedback


@transaction.atomic
def update_feedback(feedback, **fields):
    for name, value in fields.items():
        setattr(feedback, name, value)
    feedback.save(update_fields=list(fields) + ['updated_at'])
    update_menu_item_rating(feedback.menu_item_id)
    return feedback


@transaction.atomic
def delete_feedback(feedback):
    menu_item_id = feedback.menu_item_id
    feedback.delete()
    update_menu_item_rating(menu_item_id)


def mark_helpful(feedback, user):
    if feedback.helpful_users.filter(pk=user.pk).exists():
        raise ValidationError({'message': "Already marked as helpful"})
    feedback.helpful_users.add(user)
    return feedback.helpful_users.count()


def respond(feedback, admin, message):
    feedback.admin_response = message
    feedback.responded_by = admin
    feedback.responded_at = timezone.now()
    feedback.save(update_fields=['admin_response', 'responded_by', 'responded_at', 'updated_at'])
    logger.info(f"Admin {admin.email} responded to feedback {feedback.pk}")
    return feedback


@transaction.atomic
def set_status(feedback, status):
    feedback.status = status
    feedback.save(update_fields=['status', 'updated_at'])
    update_menu_item_rating(feedback.menu_item_id)
    return feedback
