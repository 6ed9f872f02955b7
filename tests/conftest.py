from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from authentication.models import CustomUser
from inventory.models import MenuItem
from wallet.models import Transaction
from wallet.services import credit_wallet


def fund(user, amount):
    """Give ``user`` money through the ledger so replays stay consistent"""
    credit_wallet(user.pk, Decimal(amount), Transaction.CATEGORY_ADJUSTMENT, "Opening balance",
                  payment_method='admin-adjustment')
    user.refresh_from_db()
    return user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def student(db):
    user = CustomUser.objects.create_user(
        email='john@student.edu', password='student123', first_name='John', last_name='Doe',
        student_id='CS2021001', department='Computer Science', year=3,
    )
    return fund(user, 500)


@pytest.fixture
def other_student(db):
    user = CustomUser.objects.create_user(
        email='jane@student.edu', password='student123', first_name='Jane', last_name='Smith',
        student_id='EC2021002', department='Electronics', year=2,
    )
    return fund(user, 300)


@pytest.fixture
def admin_user(db):
    return CustomUser.objects.create_superuser(email='admin@canteen.com', password='admin123')


@pytest.fixture
def student_client(student):
    client = APIClient()
    client.force_authenticate(user=student)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def make_item(db):
    def _make(name='Masala Dosa', price='60.00', quantity=30, **fields):
        fields.setdefault('category', 'breakfast')
        fields.setdefault('description', f"{name} from the canteen kitchen")
        return MenuItem.objects.create(name=name, price=Decimal(price), quantity=quantity, **fields)
    return _make


@pytest.fixture
def dosa(make_item):
    return make_item()


@pytest.fixture
def biryani(make_item):
    return make_item(name='Chicken Biryani', price='120.00', quantity=25, category='lunch')
