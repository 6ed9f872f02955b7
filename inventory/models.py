from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.utils import timezone
from authentication.models import TimeStampedModel


WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']


class MenuItemQuerySet(models.QuerySet):

    def served_on(self, day):
        """Items listed for ``day``; an empty day list means every day"""
        return self.filter(Q(available_days='') | Q(available_days__icontains=day))

    def served_at(self, moment):
        """Items whose serving window (if any) contains ``moment``"""
        current = moment.time()
        return self.filter(
            Q(available_from__isnull=True) | Q(available_from__lte=current),
            Q(available_to__isnull=True) | Q(available_to__gte=current),
        )

    def today(self):
        return self.served_on(WEEKDAYS[timezone.localtime().weekday()])


class MenuItem(TimeStampedModel):
    CATEGORY_CHOICES = [
        ("breakfast", "Breakfast"),
        ("lunch", "Lunch"),
        ("dinner", "Dinner"),
        ("snacks", "Snacks"),
        ("beverages", "Beverages"),
        ("desserts", "Desserts"),
    ]

    SPICE_CHOICES = [
        ("none", "None"),
        ("mild", "Mild"),
        ("medium", "Medium"),
        ("hot", "Hot"),
        ("very-hot", "Very Hot"),
    ]

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    image = models.CharField(max_length=500, blank=True)

    ingredients = models.JSONField(default=list, blank=True)
    nutritional_info = models.JSONField(default=dict, blank=True)  # calories, protein, carbs, fat

    is_vegetarian = models.BooleanField(default=False)
    is_vegan = models.BooleanField(default=False)
    is_gluten_free = models.BooleanField(default=False)
    spice_level = models.CharField(max_length=20, choices=SPICE_CHOICES, default="none")
    preparation_time = models.PositiveIntegerField(default=15)  # in minutes

    # Availability
    is_available = models.BooleanField(default=True)
    available_days = models.CharField(max_length=100, blank=True)  # comma separated weekday names
    available_from = models.TimeField(null=True, blank=True)
    available_to = models.TimeField(null=True, blank=True)

    # Units left for the day; only moved through inventory.services
    quantity = models.PositiveIntegerField(default=100)

    # Derived from active feedback
    rating_average = models.FloatField(default=0)
    rating_count = models.PositiveIntegerField(default=0)

    objects = MenuItemQuerySet.as_manager()

    class Meta:
        ordering = ['category', 'name']
        indexes = [
            models.Index(fields=['category', 'is_available'], name='menu_category_available_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=0), name='menu_item_quantity_non_negative'),
            models.CheckConstraint(condition=Q(price__gte=0), name='menu_item_price_non_negative'),
        ]

    def __str__(self):
        return self.name

    @property
    def days(self):
        return [day for day in self.available_days.split(',') if day]

    @days.setter
    def days(self, values):
        self.available_days = ','.join(day for day in WEEKDAYS if day in set(values or []))
