import logging

from django.db.models import F

from authentication.exceptions import InsufficientStock
from .models import MenuItem

logger = logging.getLogger(__name__)


def reserve_stock(menu_item, quantity):
    """
    Take ``quantity`` units of ``menu_item`` off the day's stock.

    The decrement is a single conditional UPDATE, so two orders racing for
    the last units cannot both succeed.
    """
    updated = MenuItem.objects.filter(
        pk=menu_item.pk, quantity__gte=quantity
    ).update(quantity=F('quantity') - quantity)

    if not updated:
        available = MenuItem.objects.filter(pk=menu_item.pk).values_list('quantity', flat=True).first() or 0
        logger.warning(f"Stock reservation refused for {menu_item.name}: wanted {quantity}, have {available}")
        raise InsufficientStock(menu_item.name, quantity, available)


def restore_stock(menu_item_id, quantity):
    """Best-effort return of ``quantity`` units; missing items are skipped"""
    if menu_item_id is None:
        return False
    updated = MenuItem.objects.filter(pk=menu_item_id).update(quantity=F('quantity') + quantity)
    if not updated:
        logger.info(f"Menu item {menu_item_id} no longer exists, skipped restoring {quantity} units")
    return bool(updated)


def restock(menu_item, quantity):
    """Admin reset of the day's stock"""
    MenuItem.objects.filter(pk=menu_item.pk).update(quantity=quantity)
    menu_item.refresh_from_db(fields=['quantity'])
    logger.info(f"Restocked {menu_item.name} to {quantity}")
    return menu_item
