from django.db import models
from django.db.models import Q
from authentication.models import CustomUser


class Transaction(models.Model):
    """Append-only wallet ledger entry"""
    TYPE_CREDIT = 'credit'
    TYPE_DEBIT = 'debit'
    TYPE_CHOICES = (
        (TYPE_CREDIT, "Credit"),
        (TYPE_DEBIT, "Debit"),
    )

    CATEGORY_RECHARGE = 'recharge'
    CATEGORY_FOOD_PURCHASE = 'food-purchase'
    CATEGORY_REFUND = 'refund'
    CATEGORY_ADJUSTMENT = 'adjustment'
    CATEGORY_CHOICES = (
        (CATEGORY_RECHARGE, "Recharge"),
        (CATEGORY_FOOD_PURCHASE, "Food Purchase"),
        (CATEGORY_REFUND, "Refund"),
        (CATEGORY_ADJUSTMENT, "Adjustment"),
    )

    PAYMENT_METHOD_CHOICES = (
        ("card", "Card"),
        ("upi", "UPI"),
        ("net-banking", "Net Banking"),
        ("cash", "Cash"),
        ("wallet", "Wallet"),
        ("admin-adjustment", "Admin Adjustment"),
    )

    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("failed", "Failed"),
        ("cancelled", "Cancelled"),
    )

    user = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='transactions')
    transaction_id = models.CharField(max_length=30, unique=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.CharField(max_length=200)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    order = models.ForeignKey('orders.Order', on_delete=models.PROTECT, null=True, blank=True, related_name='transactions')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="completed")
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    performed_by = models.ForeignKey(
        CustomUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='performed_adjustments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='txn_user_created_idx'),
            models.Index(fields=['type', 'category'], name='txn_type_category_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name='transaction_amount_positive'),
            models.CheckConstraint(condition=Q(balance_after__gte=0), name='transaction_balance_after_non_negative'),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Ledger entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger entries cannot be deleted")

    @property
    def signed_amount(self):
        return self.amount if self.type == self.TYPE_CREDIT else -self.amount

    def __str__(self):
        return f"{self.transaction_id} {self.type} {self.amount} ({self.category})"
