import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='MenuItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100)),
                ('description', models.CharField(max_length=500)),
                ('category', models.CharField(choices=[('breakfast', 'Breakfast'), ('lunch', 'Lunch'), ('dinner', 'Dinner'), ('snacks', 'Snacks'), ('beverages', 'Beverages'), ('desserts', 'Desserts')], max_length=20)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('image', models.CharField(blank=True, max_length=500)),
                ('ingredients', models.JSONField(blank=True, default=list)),
                ('nutritional_info', models.JSONField(blank=True, default=dict)),
                ('is_vegetarian', models.BooleanField(default=False)),
                ('is_vegan', models.BooleanField(default=False)),
                ('is_gluten_free', models.BooleanField(default=False)),
                ('spice_level', models.CharField(choices=[('none', 'None'), ('mild', 'Mild'), ('medium', 'Medium'), ('hot', 'Hot'), ('very-hot', 'Very Hot')], default='none', max_length=20)),
                ('preparation_time', models.PositiveIntegerField(default=15)),
                ('is_available', models.BooleanField(default=True)),
                ('available_days', models.CharField(blank=True, max_length=100)),
                ('available_from', models.TimeField(blank=True, null=True)),
                ('available_to', models.TimeField(blank=True, null=True)),
                ('quantity', models.PositiveIntegerField(default=100)),
                ('rating_average', models.FloatField(default=0)),
                ('rating_count', models.PositiveIntegerField(default=0)),
            ],
            options={
                'ordering': ['category', 'name'],
                'indexes': [models.Index(fields=['category', 'is_available'], name='menu_category_available_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='menu_item_quantity_non_negative'), models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='menu_item_price_non_negative')],
            },
        ),
    ]
