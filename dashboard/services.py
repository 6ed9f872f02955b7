"""Aggregations behind the admin back-office"""
from decimal import Decimal
from datetime import timedelta

from django.db.models import Sum, Count, Avg, F, DecimalField, ExpressionWrapper
from django.db.models.functions import TruncDate, ExtractHour
from django.utils import timezone

from authentication.models import CustomUser
from feedback.models import Feedback
from inventory.models import MenuItem
from orders.models import Order, OrderItem
from wallet.models import Transaction


LINE_TOTAL = ExpressionWrapper(F('price') * F('quantity'), output_field=DecimalField(max_digits=12, decimal_places=2))


def _revenue(queryset):
    # Cancelled orders are refunded and do not count as revenue
    total = queryset.exclude(status=Order.CANCELLED).aggregate(total=Sum('total_amount'))['total']
    return total or Decimal('0.00')


def _per_day(queryset, **aggregates):
    return list(
        queryset.annotate(day=TruncDate('created_at')).values('day').annotate(**aggregates).order_by('day')
    )


def dashboard_overview():
    today = timezone.localdate()
    week_ago = today - timedelta(days=6)
    orders_today = Order.objects.filter(created_at__date=today)
    average_rating = Feedback.objects.aggregate(avg=Avg('rating'))['avg']

    overview = {
        'total_students': CustomUser.objects.filter(role=CustomUser.ROLE_STUDENT).count(),
        'total_orders': Order.objects.count(),
        'today_orders': orders_today.count(),
        'total_revenue': _revenue(Order.objects.all()),
        'today_revenue': _revenue(orders_today),
        'available_menu_items': MenuItem.objects.filter(is_available=True).count(),
        'pending_orders': Order.objects.filter(status__in=Order.ACTIVE_STATUSES).count(),
        'completed_today': orders_today.filter(status=Order.COMPLETED).count(),
        'average_rating': round(average_rating, 1) if average_rating is not None else 0,
        'total_feedback': Feedback.objects.count(),
    }

    recent_orders = list(
        orders_today.select_related('user').order_by('-created_at').values(
            'id', 'order_number', 'user__email', 'total_amount', 'status', 'created_at'
        )[:10]
    )
    popular_items = list(
        OrderItem.objects.exclude(order__status=Order.CANCELLED).values('menu_item_name').annotate(
            quantity=Sum('quantity')
        ).order_by('-quantity')[:5]
    )
    revenue_stats = _per_day(
        Order.objects.exclude(status=Order.CANCELLED).filter(created_at__date__gte=week_ago),
        revenue=Sum('total_amount'), orders=Count('id'),
    )

    return {
        'overview': overview,
        'recent_orders': recent_orders,
        'popular_items': popular_items,
        'revenue_stats': revenue_stats,
    }


def analytics(days):
    since = timezone.now() - timedelta(days=days)
    orders = Order.objects.filter(created_at__gte=since)

    return {
        'period_days': days,
        'order_trends': _per_day(orders, orders=Count('id'), revenue=Sum('total_amount')),
        'revenue_trends': _per_day(orders.exclude(status=Order.CANCELLED), revenue=Sum('total_amount')),
        'category_stats': list(
            OrderItem.objects.filter(order__created_at__gte=since, menu_item__isnull=False).values(
                category=F('menu_item__category')
            ).annotate(orders=Count('id'), revenue=Sum(LINE_TOTAL)).order_by('category')
        ),
        'user_growth': _per_day(
            CustomUser.objects.filter(role=CustomUser.ROLE_STUDENT, created_at__gte=since), new_users=Count('id')
        ),
        'feedback_trends': _per_day(
            Feedback.objects.filter(created_at__gte=since), feedback=Count('id'), average_rating=Avg('rating')
        ),
        'peak_hours': list(
            orders.annotate(hour=ExtractHour('created_at')).values('hour').annotate(
                orders=Count('id')
            ).order_by('hour')
        ),
    }


def student_stats(user):
    orders = Order.objects.filter(user=user).aggregate(
        total_orders=Count('id'), total_spent=Sum('total_amount'), average_order_value=Avg('total_amount')
    )
    feedback = Feedback.objects.filter(user=user).aggregate(total_feedback=Count('id'), average_rating=Avg('rating'))
    transactions = list(
        Transaction.objects.filter(user=user).values('type').annotate(
            count=Count('id'), amount=Sum('amount')
        ).order_by('type')
    )

    return {
        'orders': {
            'total_orders': orders['total_orders'],
            'total_spent': orders['total_spent'] or Decimal('0.00'),
            'average_order_value': orders['average_order_value'] or Decimal('0.00'),
        },
        'transactions': transactions,
        'feedback': {
            'total_feedback': feedback['total_feedback'],
            'average_rating': feedback['average_rating'] or 0,
        },
    }
