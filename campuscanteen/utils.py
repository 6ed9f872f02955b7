import logging
import secrets
import string

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from authentication.exceptions import Conflict

logger = logging.getLogger(__name__)


def generate_order_number():
    """ORD + YYYYMMDD + 4 random uppercase letters/digits"""
    alphabet = string.ascii_uppercase + string.digits
    date_str = timezone.localtime().strftime('%Y%m%d')
    suffix = ''.join(secrets.choice(alphabet) for _ in range(4))
    return f"ORD{date_str}{suffix}"


def generate_transaction_id():
    """TXN + YYYYMMDD + HHMMSS + 4 random digits"""
    stamp = timezone.localtime().strftime('%Y%m%d%H%M%S')
    suffix = ''.join(secrets.choice(string.digits) for _ in range(4))
    return f"TXN{stamp}{suffix}"


def create_with_unique_reference(model, field, generator, **fields):
    """
    Create ``model`` with ``field`` set to a freshly generated reference.

    A taken reference is regenerated; an insert that still loses the race
    on the unique index is retried inside its own savepoint so the
    surrounding transaction stays usable.
    """
    attempts = settings.CANTEEN['REFERENCE_RETRY_ATTEMPTS']
    for attempt in range(1, attempts + 1):
        reference = generator()
        if model.objects.filter(**{field: reference}).exists():
            logger.warning(f"{model.__name__}.{field} collision on {reference} (attempt {attempt})")
            continue
        try:
            with transaction.atomic():
                return model.objects.create(**{field: reference}, **fields)
        except IntegrityError:
            if not model.objects.filter(**{field: reference}).exists():
                raise
            logger.warning(f"{model.__name__}.{field} insert race on {reference} (attempt {attempt})")

    raise Conflict(f"Could not allocate a unique {field} after {attempts} attempts")
