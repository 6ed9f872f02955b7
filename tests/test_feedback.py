import pytest

from feedback.models import Feedback
from orders.models import Order
from orders.services import place_order, update_order_status

pytestmark = pytest.mark.django_db


@pytest.fixture
def completed_order(student, admin_user, dosa, biryani):
    order = place_order(student, [
        {'menu_item_id': dosa.pk, 'quantity': 1},
        {'menu_item_id': biryani.pk, 'quantity': 1},
    ], 'wallet')
    for status in [Order.CONFIRMED, Order.PREPARING, Order.READY, Order.COMPLETED]:
        update_order_status(order.pk, status, admin_user)
    return order


def rate(client, order, item, rating, **extra):
    return client.post('/feedback/', dict(order_id=order.pk, menu_item_id=item.pk, rating=rating, **extra), format='json')


def test_feedback_updates_item_rating(student_client, completed_order, dosa):
    response = rate(student_client, completed_order, dosa, 4, review='Crispy', taste=5)

    assert response.status_code == 201
    assert response.data['aspects'] == {'taste': 5}

    dosa.refresh_from_db()
    assert dosa.rating_average == 4.0
    assert dosa.rating_count == 1


def test_rating_average_is_rounded(student, other_student, admin_user, dosa, api_client):
    for user, rating in [(student, 4), (other_student, 5), (student, 5)]:
        order = place_order(user, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')
        for status in [Order.CONFIRMED, Order.PREPARING, Order.READY, Order.COMPLETED]:
            update_order_status(order.pk, status, admin_user)
        api_client.force_authenticate(user=user)
        assert rate(api_client, order, dosa, rating).status_code == 201

    dosa.refresh_from_db()
    assert dosa.rating_average == 4.7
    assert dosa.rating_count == 3


def test_duplicate_feedback_conflicts(student_client, completed_order, dosa):
    rate(student_client, completed_order, dosa, 4)

    response = rate(student_client, completed_order, dosa, 2)

    assert response.status_code == 409
    assert Feedback.objects.count() == 1


def test_only_completed_orders_can_be_rated(student_client, student, dosa):
    order = place_order(student, [{'menu_item_id': dosa.pk, 'quantity': 1}], 'wallet')

    response = rate(student_client, order, dosa, 5)

    assert response.status_code == 400


def test_item_must_be_in_order(student_client, completed_order, make_item):
    stranger = make_item(name='Gulab Jamun', price='40.00', category='desserts')

    response = rate(student_client, completed_order, stranger, 5)

    assert response.status_code == 400


def test_cannot_rate_someone_elses_order(api_client, other_student, completed_order, dosa):
    api_client.force_authenticate(user=other_student)

    response = rate(api_client, completed_order, dosa, 1)

    assert response.status_code == 403


def test_order_marked_rated_when_every_item_has_feedback(student_client, completed_order, dosa, biryani):
    rate(student_client, completed_order, dosa, 4)
    completed_order.refresh_from_db()
    assert completed_order.is_rated is False

    rate(student_client, completed_order, biryani, 5)
    completed_order.refresh_from_db()
    assert completed_order.is_rated is True


def test_hiding_and_deleting_feedback_recomputes_rating(student_client, admin_client, completed_order, dosa):
    feedback_id = rate(student_client, completed_order, dosa, 2).data['id']

    response = admin_client.patch(f'/feedback/{feedback_id}/status/', {'status': 'hidden'}, format='json')
    assert response.status_code == 200
    dosa.refresh_from_db()
    assert (dosa.rating_average, dosa.rating_count) == (0, 0)

    admin_client.patch(f'/feedback/{feedback_id}/status/', {'status': 'active'}, format='json')
    dosa.refresh_from_db()
    assert dosa.rating_count == 1

    assert student_client.delete(f'/feedback/{feedback_id}/').status_code == 200
    dosa.refresh_from_db()
    assert (dosa.rating_average, dosa.rating_count) == (0, 0)


def test_update_own_feedback(student_client, api_client, other_student, completed_order, dosa):
    feedback_id = rate(student_client, completed_order, dosa, 2).data['id']

    response = student_client.put(f'/feedback/{feedback_id}/', {'rating': 5, 'review': 'Better today'}, format='json')
    assert response.status_code == 200
    dosa.refresh_from_db()
    assert dosa.rating_average == 5.0

    api_client.force_authenticate(user=other_student)
    assert api_client.put(f'/feedback/{feedback_id}/', {'rating': 1}, format='json').status_code == 403


def test_public_listing_hides_anonymous_reviewers(api_client, student_client, completed_order, dosa):
    rate(student_client, completed_order, dosa, 5, is_anonymous=True)

    response = api_client.get(f'/feedback/menu-item/{dosa.pk}/')

    assert response.status_code == 200
    row = response.data['results'][0]
    assert row['user_name'] == 'Anonymous'
    assert row['user'] is None
    assert response.data['rating_distribution'] == [{'rating': 5, 'count': 1}]


def test_helpful_once_per_user(api_client, other_student, student_client, completed_order, dosa):
    feedback_id = rate(student_client, completed_order, dosa, 5).data['id']
    api_client.force_authenticate(user=other_student)

    first = api_client.post(f'/feedback/{feedback_id}/helpful/')
    assert first.data['helpful_count'] == 1

    second = api_client.post(f'/feedback/{feedback_id}/helpful/')
    assert second.status_code == 400


def test_admin_response(admin_client, admin_user, student_client, completed_order, dosa):
    feedback_id = rate(student_client, completed_order, dosa, 3).data['id']

    response = admin_client.post(f'/feedback/{feedback_id}/respond/', {'message': 'Thanks, we will fix it'}, format='json')

    assert response.status_code == 200
    assert response.data['admin_response'] == 'Thanks, we will fix it'
    assert response.data['responded_by'] == admin_user.pk

    too_long = admin_client.post(f'/feedback/{feedback_id}/respond/', {'message': 'x' * 301}, format='json')
    assert too_long.status_code == 400


def test_my_feedback_and_admin_list(student_client, admin_client, completed_order, dosa):
    rate(student_client, completed_order, dosa, 3)

    assert student_client.get('/feedback/my-feedback/').data['count'] == 1
    assert admin_client.get('/feedback/admin/all/', {'rating': 3}).data['count'] == 1
    assert student_client.get('/feedback/admin/all/').status_code == 403


def test_patch_feedback_keeps_unsent_fields(student_client, completed_order, dosa):
    feedback_id = rate(student_client, completed_order, dosa, 4, review='Crispy').data['id']

    response = student_client.patch(f'/feedback/{feedback_id}/', {'review': 'Crispy and hot'}, format='json')

    assert response.status_code == 200
    feedback = Feedback.objects.get(pk=feedback_id)
    assert (feedback.rating, feedback.review) == (4, 'Crispy and hot')
    dosa.refresh_from_db()
    assert dosa.rating_average == 4.0
