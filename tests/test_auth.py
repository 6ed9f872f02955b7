from decimal import Decimal

import pytest

from authentication.models import CustomUser
from orders.services import place_order
from wallet.services import replay_balance

pytestmark = pytest.mark.django_db


def test_register_student_starts_with_empty_wallet(api_client):
    response = api_client.post('/auth/register/', {
        'email': 'mike@student.edu',
        'password': 'Tiffin#2024',
        'confirm_password': 'Tiffin#2024',
        'first_name': 'Mike',
        'last_name': 'Johnson',
        'student_id': 'ME2021003',
        'department': 'Mechanical',
        'year': 4,
    }, format='json')

    assert response.status_code == 201
    assert 'access' in response.data
    user = CustomUser.objects.get(email='mike@student.edu')
    assert user.role == CustomUser.ROLE_STUDENT
    assert user.wallet_balance == Decimal('0.00')


def test_register_rejects_mismatched_passwords(api_client):
    response = api_client.post('/auth/register/', {
        'email': 'mike@student.edu', 'password': 'Tiffin#2024', 'confirm_password': 'Tiffin#2025',
    }, format='json')

    assert response.status_code == 400
    assert response.data['error'] is True
    assert response.data['message'] == 'Validation error'


def test_login_returns_tokens_and_profile(api_client, student):
    response = api_client.post('/auth/login/', {'email': 'john@student.edu', 'password': 'student123'}, format='json')

    assert response.status_code == 200
    assert response.data['user']['email'] == 'john@student.edu'
    assert response.data['access']
    student.refresh_from_db()
    assert student.last_login_at is not None


def test_login_with_bad_password(api_client, student):
    response = api_client.post('/auth/login/', {'email': 'john@student.edu', 'password': 'nope'}, format='json')

    assert response.status_code == 400


def test_bearer_token_authenticates(api_client, student):
    tokens = api_client.post('/auth/login/', {'email': 'john@student.edu', 'password': 'student123'}, format='json').data
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

    response = api_client.get('/wallet/balance/')

    assert response.status_code == 200


def test_profile_cannot_touch_wallet_or_role(student_client, student):
    response = student_client.patch('/profile/', {
        'department': 'Data Science', 'wallet_balance': '99999', 'role': 'admin',
    }, format='json')

    assert response.status_code == 200
    student.refresh_from_db()
    assert student.department == 'Data Science'
    assert student.wallet_balance == Decimal('500.00')
    assert student.role == CustomUser.ROLE_STUDENT


def test_unauthenticated_requests_get_error_envelope(api_client):
    response = api_client.get('/wallet/balance/')

    assert response.status_code == 401
    assert response.data['message'] == 'Authentication required'
    assert response.data['status_code'] == 401


def test_health(api_client):
    response = api_client.get('/health/')

    assert response.status_code == 200
    assert response.data['database'] == 'connected'


def test_profile_update_keeps_wallet_balance_from_ledger(student_client, student, dosa):
    # The authenticated user object still holds the balance from before the order
    place_order(CustomUser.objects.get(pk=student.pk), [{'menu_item_id': dosa.pk, 'quantity': 2}], 'wallet')
    assert student.wallet_balance == Decimal('500.00')

    response = student_client.patch('/profile/', {'department': 'Physics'}, format='json')

    assert response.status_code == 200
    student.refresh_from_db()
    assert student.department == 'Physics'
    assert student.wallet_balance == Decimal('380.00')
    assert replay_balance(student) == student.wallet_balance


def test_profile_password_change_is_saved(student_client, student):
    response = student_client.patch('/profile/', {
        'password': 'Samosa#2025', 'confirm_password': 'Samosa#2025',
    }, format='json')

    assert response.status_code == 200
    student.refresh_from_db()
    assert student.check_password('Samosa#2025')
