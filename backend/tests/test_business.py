import pytest

from gladgrade import db
from gladgrade.models import Business


@pytest.fixture
def client_user(make_user):
    return make_user(role='Client', first_name='Owner')


def _create_business(client, headers, business_type_id, **extra):
    payload = {'businessName': 'Cafe One', 'businessTypeId': business_type_id, 'city': 'Miami'}
    payload.update(extra)
    return client.post('/api/business/businesses', json=payload, headers=headers)


def test_sector_and_type_reads(client, user, auth_headers, business_type):
    headers = auth_headers(user)
    sectors = client.get('/api/business/sectors', headers=headers).get_json()['sectors']
    assert [sector['business_sector_name'] for sector in sectors] == ['Food & Drink']

    types = client.get(f"/api/business/types/by-sector/{sectors[0]['id']}", headers=headers).get_json()['types']
    assert [item['business_type'] for item in types] == ['Restaurant']

    assert client.get('/api/business/types/999', headers=headers).status_code == 404
    assert client.get('/api/business/sectors/x', headers=headers).status_code == 400


def test_only_admin_manages_taxonomy(client, user, admin, auth_headers):
    payload = {'businessSectorName': 'Education'}
    assert client.post('/api/business/sectors', json=payload, headers=auth_headers(user)).status_code == 403

    response = client.post('/api/business/sectors', json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    sector_id = response.get_json()['sector']['id']

    response = client.post('/api/business/types', json={'businessType': 'University', 'businessSectorId': sector_id},
                           headers=auth_headers(admin))
    assert response.status_code == 201
    type_id = response.get_json()['type']['id']

    response = client.put(f'/api/business/types/{type_id}', json={'isExternal': True}, headers=auth_headers(admin))
    assert response.get_json()['type']['is_external'] is True
    assert response.get_json()['type']['business_type'] == 'University'

    response = client.post('/api/business/types', json={'businessType': 'Orphan', 'businessSectorId': 999},
                           headers=auth_headers(admin))
    assert response.status_code == 400


def test_plain_user_cannot_create_business(client, user, auth_headers, business_type):
    assert _create_business(client, auth_headers(user), business_type.id).status_code == 403


def test_client_creates_business_active_and_unverified(client, client_user, auth_headers, business_type):
    response = _create_business(client, auth_headers(client_user), business_type.id, isVerified=True, isActive=False)
    assert response.status_code == 201
    business = response.get_json()['business']
    assert business['is_active'] is True
    assert business['is_verified'] is False
    assert business['business_sector_name'] == 'Food & Drink'

    mine = client.get('/api/business/my-businesses', headers=auth_headers(client_user)).get_json()['businesses']
    assert [item['id'] for item in mine] == [business['id']]


def test_owner_cannot_change_status_flags(client, client_user, admin, auth_headers, business_type):
    business_id = _create_business(client, auth_headers(client_user), business_type.id).get_json()['business']['id']

    response = client.put(f'/api/business/businesses/{business_id}',
                          json={'businessName': 'Cafe Two', 'isActive': False, 'isVerified': True},
                          headers=auth_headers(client_user))
    assert response.status_code == 200
    business = response.get_json()['business']
    assert business['business_name'] == 'Cafe Two'
    assert business['is_active'] is True
    assert business['is_verified'] is False

    response = client.put(f'/api/business/businesses/{business_id}', json={'isVerified': True},
                          headers=auth_headers(admin))
    assert response.get_json()['business']['is_verified'] is True


def test_other_user_cannot_update_business(client, client_user, other_user, auth_headers, business_type):
    business_id = _create_business(client, auth_headers(client_user), business_type.id).get_json()['business']['id']
    response = client.put(f'/api/business/businesses/{business_id}', json={'city': 'Tampa'},
                          headers=auth_headers(other_user))
    assert response.status_code == 403


def test_inactive_business_hidden_from_non_owners(client, client_user, other_user, admin, auth_headers,
                                                  business_type):
    business_id = _create_business(client, auth_headers(client_user), business_type.id).get_json()['business']['id']
    business = db.session.get(Business, business_id)
    business.is_active = False
    db.session.commit()

    url = f'/api/business/businesses/{business_id}'
    assert client.get(url, headers=auth_headers(other_user)).status_code == 404
    assert client.get(url, headers=auth_headers(client_user)).status_code == 200
    assert client.get(url, headers=auth_headers(admin)).status_code == 200


def test_admin_business_listing(client, client_user, admin, auth_headers, business_type):
    headers = auth_headers(client_user)
    _create_business(client, headers, business_type.id, businessName='Alpha Diner')
    _create_business(client, headers, business_type.id, businessName='Beta Bistro', city='Orlando')

    response = client.get('/api/business/businesses?search=orlando', headers=auth_headers(admin))
    body = response.get_json()
    assert body['pagination']['total'] == 1
    assert body['data'][0]['business_name'] == 'Beta Bistro'

    response = client.get('/api/business/businesses?isVerified=false', headers=auth_headers(admin))
    assert response.get_json()['pagination']['total'] == 2

    assert client.get('/api/business/businesses?isActive=maybe', headers=auth_headers(admin)).status_code == 400


def test_type_update_rejects_bad_values(client, admin, auth_headers, business_type):
    headers = auth_headers(admin)
    url = f'/api/business/types/{business_type.id}'

    assert client.put(url, json={'businessSectorId': None}, headers=headers).status_code == 400
    assert client.put(url, json={'isExternal': 'sometimes'}, headers=headers).status_code == 400

    response = client.put(url, json={'isExternal': 'true'}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['type']['is_external'] is True
    assert response.get_json()['type']['business_type'] == 'Restaurant'
