import pytest

from gladgrade import db
from gladgrade.models import (
    EduArea, EduClassCode, EduDepartment, EduDorm, EduLocation, EduProfessor, EduProfessorCourse, Image,
)


@pytest.fixture
def campus(app, user, image_type_id):
    area = EduArea(name='South Florida')
    department = EduDepartment(name='Computer Science')
    db.session.add_all([area, department])
    db.session.flush()

    location = EduLocation(edu_area_id=area.id, name='Bay University', place_id='place-bay')
    hidden_location = EduLocation(edu_area_id=area.id, name='Closed College', is_active=False)
    professor = EduProfessor(edu_department_id=department.id, name='Grace Hopper')
    class_code = EduClassCode(edu_department_id=department.id, code='CS101', name='Intro to CS')
    db.session.add_all([location, hidden_location, professor, class_code])
    db.session.flush()

    dorm = EduDorm(edu_location_id=location.id, name='Pine Hall')
    db.session.add_all([dorm, EduProfessorCourse(professor_id=professor.id, edu_class_code_id=class_code.id)])
    db.session.flush()
    db.session.add_all([
        Image(image_type_id=image_type_id, edu_dorm_id=dorm.id, user_id=user.id, image_url='/pine.png'),
        Image(image_type_id=image_type_id, edu_dorm_id=dorm.id, user_id=user.id, image_url='/gone.png',
              is_active=False),
    ])
    db.session.commit()
    return {'area': area, 'location': location, 'dorm': dorm, 'department': department, 'professor': professor}


def test_locations_by_area_skip_inactive(client, user, auth_headers, campus):
    response = client.get(f"/api/education/locations/by-area/{campus['area'].id}", headers=auth_headers(user))
    locations = response.get_json()['locations']
    assert [location['name'] for location in locations] == ['Bay University']
    assert locations[0]['area_name'] == 'South Florida'


def test_dorm_includes_active_images(client, user, auth_headers, campus):
    response = client.get(f"/api/education/dorms/{campus['dorm'].id}", headers=auth_headers(user))
    dorm = response.get_json()['dorm']
    assert dorm['name'] == 'Pine Hall'
    assert [image['image_url'] for image in dorm['images']] == ['/pine.png']

    by_location = client.get(f"/api/education/dorms/by-location/{campus['location'].id}",
                             headers=auth_headers(user)).get_json()['dorms']
    assert len(by_location) == 1


def test_professor_courses(client, user, auth_headers, campus):
    headers = auth_headers(user)
    professors = client.get(f"/api/education/professors/by-department/{campus['department'].id}",
                            headers=headers).get_json()['professors']
    assert professors[0]['department_name'] == 'Computer Science'

    courses = client.get(f"/api/education/professors/{campus['professor'].id}/courses",
                         headers=headers).get_json()['courses']
    assert [(course['code'], course['name']) for course in courses] == [('CS101', 'Intro to CS')]

    class_codes = client.get(f"/api/education/class-codes/by-department/{campus['department'].id}",
                             headers=headers).get_json()['classCodes']
    assert [code['code'] for code in class_codes] == ['CS101']


def test_missing_records_are_404(client, user, auth_headers):
    headers = auth_headers(user)
    for path in ('/api/education/areas/99', '/api/education/locations/99', '/api/education/dorms/99',
                 '/api/education/professors/99'):
        assert client.get(path, headers=headers).status_code == 404


def test_admin_manages_areas_and_locations(client, user, admin, auth_headers):
    assert client.post('/api/education/areas', json={'name': 'X'}, headers=auth_headers(user)).status_code == 403

    headers = auth_headers(admin)
    response = client.post('/api/education/areas', json={'name': 'Central'}, headers=headers)
    assert response.status_code == 201
    area_id = response.get_json()['area']['id']

    response = client.post('/api/education/locations', json={'eduAreaId': area_id, 'name': 'Metro College'},
                           headers=headers)
    assert response.status_code == 201
    location_id = response.get_json()['location']['id']

    response = client.put(f'/api/education/locations/{location_id}', json={'placeId': 'place-metro'},
                          headers=headers)
    location = response.get_json()['location']
    assert location['place_id'] == 'place-metro'
    assert location['name'] == 'Metro College'

    response = client.put(f'/api/education/areas/{area_id}', json={'isActive': False}, headers=headers)
    assert response.get_json()['area']['is_active'] is False
    assert client.get('/api/education/areas', headers=headers).get_json()['areas'] == []

    response = client.post('/api/education/locations', json={'eduAreaId': 999, 'name': 'Nowhere'}, headers=headers)
    assert response.status_code == 400
