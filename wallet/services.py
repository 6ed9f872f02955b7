"""
Wallet ledger service.

Every change to ``CustomUser.wallet_balance`` goes through this module. A
balance change and its ledger entry are written together: callers that
need more than one write (order placement, cancellation) wrap the calls in
their own ``transaction.atomic()`` block, the public operations here open
one themselves.

Debits are issued as a single conditional UPDATE (``wallet_balance >=
amount``) so that concurrent debits cannot overdraw the wallet, and the
``balance_after`` recorded on the ledger entry is read back from the row
that was just updated, inside the same transaction.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Sum, Count
from django.db.models.functions import TruncMonth, TruncDate
from django.utils import timezone
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import NotFound

from authentication.exceptions import InsufficientFunds
from authentication.models import CustomUser
from campuscanteen.utils import create_with_unique_reference, generate_transaction_id
from .models import Transaction

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def _to_amount(value):
    return Decimal(str(value)).quantize(TWO_PLACES)


def _current_balance(user_id):
    return CustomUser.objects.values_list('wallet_balance', flat=True).get(pk=user_id)


def _record(user_id, type, amount, category, description, balance_after, **extra):
    return create_with_unique_reference(
        Transaction, 'transaction_id', generate_transaction_id,
        user_id=user_id,
        type=type,
        amount=amount,
        category=category,
        description=description[:200],
        balance_after=balance_after,
        **extra
    )


def debit_wallet(user_id, amount, category, description, **extra):
    """
    Take ``amount`` from the wallet and append the matching debit entry.

    Raises InsufficientFunds without writing anything when the balance
    does not cover the debit.
    """
    amount = _to_amount(amount)
    updated = CustomUser.objects.filter(
        pk=user_id, wallet_balance__gte=amount
    ).update(wallet_balance=F('wallet_balance') - amount)

    if not updated:
        available = _current_balance(user_id)
        logger.warning(f"Debit of {amount} refused for user {user_id}: balance {available}")
        raise InsufficientFunds(required=amount, available=available)

    balance = _current_balance(user_id)
    return _record(user_id, Transaction.TYPE_DEBIT, amount, category, description, balance, **extra)


def credit_wallet(user_id, amount, category, description, **extra):
    """Add ``amount`` to the wallet and append the matching credit entry"""
    amount = _to_amount(amount)
    updated = CustomUser.objects.filter(pk=user_id).update(wallet_balance=F('wallet_balance') + amount)
    if not updated:
        raise NotFound("User not found")

    balance = _current_balance(user_id)
    return _record(user_id, Transaction.TYPE_CREDIT, amount, category, description, balance, **extra)


@transaction.atomic
def recharge_wallet(user, amount, payment_method):
    """
    Top up a wallet. The external payment gateway is simulated as always
    confirming the payment.
    """
    txn = credit_wallet(
        user.pk, amount, Transaction.CATEGORY_RECHARGE,
        f"Wallet recharge via {payment_method}",
        payment_method=payment_method,
    )
    logger.info(f"Wallet recharge {txn.transaction_id}: user {user.email} +{txn.amount} -> {txn.balance_after}")
    return txn


@transaction.atomic
def adjust_wallet(admin, user_id, amount, type, reason):
    """
    Admin correction of a wallet. ``amount`` is taken as a magnitude and
    ``type`` gives the direction; debits never drive the balance negative.
    """
    target = get_object_or_404(CustomUser, pk=user_id)
    amount = abs(_to_amount(amount))
    description = f"Admin adjustment: {reason}"
    extra = {'payment_method': 'admin-adjustment', 'performed_by': admin}

    if type == Transaction.TYPE_CREDIT:
        txn = credit_wallet(target.pk, amount, Transaction.CATEGORY_ADJUSTMENT, description, **extra)
    else:
        txn = debit_wallet(target.pk, amount, Transaction.CATEGORY_ADJUSTMENT, description, **extra)

    logger.info(
        f"Wallet adjustment {txn.transaction_id} by {admin.email}: "
        f"{type} {amount} on {target.email} -> {txn.balance_after} ({reason})"
    )
    return txn


def replay_balance(user):
    """Rebuild a wallet balance from zero by replaying the user's ledger"""
    balance = Decimal('0.00')
    for txn in Transaction.objects.filter(user=user).order_by('id'):
        balance += txn.signed_amount
    return balance


def verify_ledger(user):
    """
    Check the ledger of ``user`` against the stored balance.

    Returns the replayed balance, the stored balance and the transactions
    whose ``balance_after`` does not follow from the previous entry.
    """
    running = Decimal('0.00')
    broken = []
    count = 0
    for txn in Transaction.objects.filter(user=user).order_by('id'):
        running += txn.signed_amount
        count += 1
        if running != txn.balance_after:
            broken.append({
                'transaction_id': txn.transaction_id,
                'expected_balance_after': str(running),
                'recorded_balance_after': str(txn.balance_after),
            })

    user.refresh_from_db(fields=['wallet_balance'])
    consistent = not broken and running == user.wallet_balance
    if not consistent:
        logger.error(f"Ledger mismatch for {user.email}: replayed {running}, stored {user.wallet_balance}")

    return {
        'user_id': str(user.pk),
        'transactions': count,
        'replayed_balance': str(running),
        'wallet_balance': str(user.wallet_balance),
        'consistent': consistent,
        'broken_links': broken,
    }


def user_wallet_stats(user, since):
    """Totals by type and monthly food spending since ``since``"""
    transactions = Transaction.objects.filter(user=user, created_at__gte=since)

    summary = list(
        transactions.values('type').annotate(total_amount=Sum('amount'), count=Count('id')).order_by('type')
    )
    monthly_spending = list(
        transactions.filter(
            type=Transaction.TYPE_DEBIT, category=Transaction.CATEGORY_FOOD_PURCHASE
        ).annotate(
            month=TruncMonth('created_at')
        ).values('month').annotate(
            total_spent=Sum('amount'), order_count=Count('id')
        ).order_by('month')
    )

    return {'summary': summary, 'monthly_spending': monthly_spending}

def admin_wallet_stats():
    """Today's movements, money held in wallets, recharges by method and recent daily spending"""
    today = timezone.localdate()

    today_transactions = list(
        Transaction.objects.filter(created_at__date=today).values('type').annotate(
            count=Count('id'), amount=Sum('amount')
        ).order_by('type')
    )
    total_balance = CustomUser.objects.aggregate(total=Sum('wallet_balance'))['total'] or Decimal('0.00')
    recharge_stats = list(
        Transaction.objects.filter(category=Transaction.CATEGORY_RECHARGE).values('payment_method').annotate(
            count=Count('id'), amount=Sum('amount')
        ).order_by('payment_method')
    )
    spending_stats = list(
        Transaction.objects.filter(category=Transaction.CATEGORY_FOOD_PURCHASE).annotate(
            day=TruncDate('created_at')
        ).values('day').annotate(amount=Sum('amount')).order_by('-day')[:7]
    )

    return {
        'today_transactions': today_transactions,
        'total_wallet_balance': total_balance,
        'recharge_stats': recharge_stats,
        'spending_stats': spending_stats,
    }
