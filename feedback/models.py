from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from authentication.models import CustomUser, TimeStampedModel
from inventory.models import MenuItem
from orders.models import Order


def rating_field(**kwargs):
    return models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)], **kwargs
    )


class Feedback(TimeStampedModel):
    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, "Active"),
        ("hidden", "Hidden"),
        ("flagged", "Flagged"),
    )

    ASPECTS = ['taste', 'quality', 'quantity', 'presentation', 'service']

    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='feedback')
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='feedback')
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='feedback')

    rating = rating_field()
    review = models.CharField(max_length=500, blank=True)

    taste = rating_field(null=True, blank=True)
    quality = rating_field(null=True, blank=True)
    quantity = rating_field(null=True, blank=True)
    presentation = rating_field(null=True, blank=True)
    service = rating_field(null=True, blank=True)

    is_anonymous = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    admin_response = models.CharField(max_length=300, blank=True)
    responded_by = models.ForeignKey(
        CustomUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='feedback_responses'
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    helpful_users = models.ManyToManyField(CustomUser, blank=True, related_name='helpful_feedback')

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['menu_item', 'status', 'created_at'], name='feedback_item_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['user', 'order', 'menu_item'], name='feedback_once_per_order_item'),
        ]

    def __str__(self):
        return f"{self.menu_item} - {self.rating}/5"

    @property
    def aspects(self):
        return {aspect: getattr(self, aspect) for aspect in self.ASPECTS if getattr(self, aspect) is not None}
