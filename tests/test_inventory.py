from datetime import time
from decimal import Decimal
from unittest import mock

import pytest
from django.utils import timezone

from inventory.models import MenuItem, WEEKDAYS
from inventory.services import restore_stock
from inventory.views import MenuItemDetailView
from orders.services import place_order

pytestmark = pytest.mark.django_db


def test_public_menu_list_and_filters(api_client, dosa, biryani, make_item):
    make_item(name='Fresh Lime Water', price='20.00', category='beverages', is_vegan=True)

    everything = api_client.get('/menu/items/')
    assert everything.status_code == 200
    assert len(everything.data) == 3

    lunch = api_client.get('/menu/items/', {'category': 'lunch'})
    assert [row['name'] for row in lunch.data] == ['Chicken Biryani']

    assert len(api_client.get('/menu/items/', {'category': 'all'}).data) == 3
    assert [row['name'] for row in api_client.get('/menu/items/', {'is_vegan': 'true'}).data] == ['Fresh Lime Water']
    assert [row['name'] for row in api_client.get('/menu/items/', {'search': 'dosa'}).data] == ['Masala Dosa']


def test_students_only_see_todays_items(api_client, admin_client, make_item):
    today = WEEKDAYS[timezone.localtime().weekday()]
    other_day = WEEKDAYS[(timezone.localtime().weekday() + 1) % 7]
    make_item(name='Today Thali', available_days=today)
    make_item(name='Tomorrow Thali', available_days=other_day)

    public = [row['name'] for row in api_client.get('/menu/items/').data]
    assert public == ['Today Thali']

    admin_view = [row['name'] for row in admin_client.get('/menu/items/').data]
    assert sorted(admin_view) == ['Today Thali', 'Tomorrow Thali']


def test_admin_creates_menu_item(admin_client):
    response = admin_client.post('/menu/items/', {
        'name': 'Vada Pav',
        'description': 'Spiced potato fritter served in a bun with chutneys',
        'category': 'snacks',
        'price': '20.00',
        'ingredients': ['Potatoes', 'Bread'],
        'nutritional_info': {'calories': 290, 'protein': 6},
        'spice_level': 'medium',
        'available_days': ['monday', 'friday'],
        'available_from': '16:00',
        'available_to': '19:00',
    }, format='json')

    assert response.status_code == 201
    item = MenuItem.objects.get(name='Vada Pav')
    assert item.days == ['monday', 'friday']
    assert item.quantity == 100
    assert response.data['ratings'] == {'average': 0, 'count': 0}


def test_menu_item_validation(admin_client):
    response = admin_client.post('/menu/items/', {
        'name': 'Late Snack', 'description': 'x', 'category': 'snacks', 'price': '10.00',
        'available_from': '20:00', 'available_to': '18:00',
        'nutritional_info': {'sodium': 3},
    }, format='json')

    assert response.status_code == 400
    assert 'nutritional_info' in response.data['details']


def test_students_cannot_write_menu(student_client, dosa):
    assert student_client.post('/menu/items/', {'name': 'x'}, format='json').status_code == 403
    assert student_client.delete(f'/menu/items/{dosa.pk}/').status_code == 403


def test_toggle_and_restock(admin_client, dosa):
    response = admin_client.patch(f'/menu/items/{dosa.pk}/toggle-availability/')
    assert response.data['is_available'] is False

    response = admin_client.patch(f'/menu/items/{dosa.pk}/restock/', {'quantity': 75}, format='json')
    assert response.data['quantity'] == 75


def test_menu_by_category(api_client, dosa, biryani, make_item):
    make_item(name='Poha', price='35.00', is_available=False)

    response = api_client.get('/menu/items/category/breakfast/')
    assert response.data['count'] == 1

    assert api_client.get('/menu/items/category/brunch/').status_code == 400


def test_serving_window(make_item):
    make_item(name='Idli Sambar', available_from=time(8, 0), available_to=time(11, 0))
    make_item(name='Masala Chai', category='beverages', price='15.00')

    morning = timezone.localtime().replace(hour=9, minute=0)
    evening = timezone.localtime().replace(hour=20, minute=0)

    assert sorted(MenuItem.objects.served_at(morning).values_list('name', flat=True)) == ['Idli Sambar', 'Masala Chai']
    assert list(MenuItem.objects.served_at(evening).values_list('name', flat=True)) == ['Masala Chai']


def test_today_special_groups_by_category(api_client, make_item):
    make_item(name='Masala Chai', category='beverages', price='15.00')

    response = api_client.get('/menu/items/today/special/')

    assert response.status_code == 200
    assert [row['name'] for row in response.data['beverages']] == ['Masala Chai']


def test_restore_stock_skips_missing_items():
    assert restore_stock(424242, 3) is False
    assert restore_stock(None, 3) is False


def test_admin_edit_does_not_overwrite_stock_or_ratings(admin_client, student, dosa):
    stale = MenuItem.objects.get(pk=dosa.pk)
    place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 5}], 'wallet')
    MenuItem.objects.filter(pk=dosa.pk).update(rating_average=4.5, rating_count=2)

    with mock.patch.object(MenuItemDetailView, 'get_object', return_value=stale):
        response = admin_client.patch(f'/menu/items/{dosa.pk}/', {'price': '65.00'}, format='json')

    assert response.status_code == 200
    dosa.refresh_from_db()
    assert dosa.price == Decimal('65.00')
    assert dosa.quantity == 25
    assert (dosa.rating_average, dosa.rating_count) == (4.5, 2)


def test_admin_edit_ignores_quantity(admin_client, dosa):
    response = admin_client.patch(f'/menu/items/{dosa.pk}/', {'quantity': 500, 'is_vegan': True}, format='json')

    assert response.status_code == 200
    dosa.refresh_from_db()
    assert dosa.quantity == 30
    assert dosa.is_vegan is True
