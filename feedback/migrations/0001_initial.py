import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def rating(**kwargs):
    return models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)], **kwargs)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        ('orders', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Feedback',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('rating', rating()),
                ('review', models.CharField(blank=True, max_length=500)),
                ('taste', rating(blank=True, null=True)),
                ('quality', rating(blank=True, null=True)),
                ('quantity', rating(blank=True, null=True)),
                ('presentation', rating(blank=True, null=True)),
                ('service', rating(blank=True, null=True)),
                ('is_anonymous', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('active', 'Active'), ('hidden', 'Hidden'), ('flagged', 'Flagged')], default='active', max_length=20)),
                ('admin_response', models.CharField(blank=True, max_length=300)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('helpful_users', models.ManyToManyField(blank=True, related_name='helpful_feedback', to=settings.AUTH_USER_MODEL)),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='feedback', to='inventory.menuitem')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='feedback', to='orders.order')),
                ('responded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='feedback_responses', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='feedback', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['menu_item', 'status', 'created_at'], name='feedback_item_status_idx')],
                'constraints': [models.UniqueConstraint(fields=('user', 'order', 'menu_item'), name='feedback_once_per_order_item')],
            },
        ),
    ]
