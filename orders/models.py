from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from inventory.models import MenuItem
from authentication.models import CustomUser
from decimal import Decimal


class Order(models.Model):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    PREPARING = 'preparing'
    READY = 'ready'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = (
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (PREPARING, "Preparing"),
        (READY, "Ready"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    )

    # Forward lifecycle; admins may force other moves out of non-terminal states
    TRANSITIONS = {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {PREPARING, CANCELLED},
        PREPARING: {READY},
        READY: {COMPLETED},
        COMPLETED: set(),
        CANCELLED: set(),
    }
    TERMINAL_STATUSES = {COMPLETED, CANCELLED}
    CANCELLABLE_STATUSES = {PENDING, CONFIRMED}
    ACTIVE_STATUSES = [PENDING, CONFIRMED, PREPARING]

    PAYMENT_WALLET = 'wallet'
    PAYMENT_METHOD_CHOICES = (
        (PAYMENT_WALLET, "Wallet"),
        ("cash", "Cash"),
        ("card", "Card"),
    )

    PAYMENT_PENDING = 'pending'
    PAYMENT_PAID = 'paid'
    PAYMENT_FAILED = 'failed'
    PAYMENT_REFUNDED = 'refunded'
    PAYMENT_STATUS_CHOICES = (
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_REFUNDED, "Refunded"),
    )

    ORDER_TYPE_CHOICES = (
        ("instant", "Instant"),
        ("pre-order", "Pre-order"),
    )

    order_number = models.CharField(max_length=20, unique=True)
    user = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='orders')

    # Sum of snapshotted line totals, fixed at creation
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    order_type = models.CharField(max_length=20, choices=ORDER_TYPE_CHOICES, default="instant")

    scheduled_time = models.DateTimeField(null=True, blank=True)
    estimated_time = models.DateTimeField(null=True, blank=True)
    actual_completion_time = models.DateTimeField(null=True, blank=True)
    notes = models.CharField(max_length=500, blank=True)
    is_rated = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='order_user_created_idx'),
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(total_amount__gte=0), name='order_total_non_negative'),
        ]

    def can_transition_to(self, status):
        return status in self.TRANSITIONS.get(self.status, set())

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_wallet_paid(self):
        return self.payment_method == self.PAYMENT_WALLET and self.payment_status == self.PAYMENT_PAID

    def __str__(self):
        return f"{self.order_number} - {self.status}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    # Kept nullable so that deleting a menu item leaves order history intact
    menu_item = models.ForeignKey(MenuItem, on_delete=models.SET_NULL, null=True, related_name='order_items')
    menu_item_name = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    # Price snapshot at order time
    price = models.DecimalField(max_digits=10, decimal_places=2)
    special_instructions = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ['id']

    @property
    def line_total(self):
        return self.price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.menu_item_name}"
