import io
import os

from gladgrade import db
from gladgrade.models import EduArea, EduDorm, EduLocation, Image
from gladgrade.services.media_service import MediaService
from gladgrade.services.rating_service import RatingService

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


def _upload(client, headers, **fields):
    data = {'image': (io.BytesIO(PNG_BYTES), 'photo.png', 'image/png')}
    data.update({key: str(value) for key, value in fields.items()})
    return client.post('/api/media/upload', data=data, headers=headers, content_type='multipart/form-data')


def test_image_types_are_seeded(client, user, auth_headers):
    response = client.get('/api/media/image-types', headers=auth_headers(user))
    names = {image_type['image_type'] for image_type in response.get_json()['types']}
    assert {'Rating', 'Review', 'Dorm'} <= names


def test_upload_stores_file_locally(app, client, user, auth_headers, image_type_id):
    rating = RatingService.create_rating(user.id, 5, place_id='P1')
    response = _upload(client, auth_headers(user), imageTypeId=image_type_id, consumerRatingId=rating.id)
    assert response.status_code == 201
    image = response.get_json()['image']
    assert image['image_url'].startswith('/static/uploads/image-')
    assert image['consumer_rating_id'] == rating.id

    filename = image['image_url'].rsplit('/', 1)[1]
    assert os.path.exists(os.path.join(app.config['UPLOAD_FOLDER'], filename))

    served = client.get(image['image_url'])
    assert served.status_code == 200
    assert served.data == PNG_BYTES


def test_upload_rejects_non_images(client, user, auth_headers, image_type_id):
    data = {'image': (io.BytesIO(b'hello'), 'notes.txt', 'text/plain'), 'imageTypeId': str(image_type_id)}
    response = client.post('/api/media/upload', data=data, headers=auth_headers(user),
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['error']['message'] == 'Only image files are allowed'


def test_upload_rejects_oversized_files(app, client, user, auth_headers, image_type_id):
    app.config['MAX_IMAGE_SIZE'] = 16
    response = _upload(client, auth_headers(user), imageTypeId=image_type_id)
    assert response.status_code == 400


def test_upload_requires_file(client, user, auth_headers, image_type_id):
    response = client.post('/api/media/upload', data={'imageTypeId': str(image_type_id)},
                           headers=auth_headers(user), content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['error']['message'] == 'No image file provided'


def test_upload_allows_at_most_one_association(client, user, auth_headers, image_type_id):
    rating = RatingService.create_rating(user.id, 5, place_id='P1')
    review = RatingService.create_review(user.id, rating.id, 'Nice')
    response = _upload(client, auth_headers(user), imageTypeId=image_type_id,
                       consumerRatingId=rating.id, consumerReviewId=review.id)
    assert response.status_code == 400
    assert Image.query.count() == 0


def test_upload_to_someone_elses_review_is_403(client, user, other_user, auth_headers, image_type_id):
    rating = RatingService.create_rating(user.id, 5, place_id='P1')
    review = RatingService.create_review(user.id, rating.id, 'Nice')
    response = _upload(client, auth_headers(other_user), imageTypeId=image_type_id, consumerReviewId=review.id)
    assert response.status_code == 403


def test_upload_storage_failure_is_500(app, client, user, auth_headers, image_type_id):
    storage = app.extensions['image_storage']
    original_save = storage.save
    storage.save = lambda file_storage, object_prefix='images/': None
    try:
        response = _upload(client, auth_headers(user), imageTypeId=image_type_id)
    finally:
        storage.save = original_save
    assert response.status_code == 500
    assert response.get_json()['error']['message'] == 'Image upload failed'


def test_delete_image_is_soft_and_owner_only(client, user, other_user, auth_headers, image_type_id):
    rating = RatingService.create_rating(user.id, 5, place_id='P1')
    image = MediaService.create_image(user.id, image_type_id, '/static/uploads/a.png', consumer_rating_id=rating.id)

    response = client.delete(f'/api/media/{image.id}', headers=auth_headers(other_user))
    assert response.status_code == 403

    response = client.delete(f'/api/media/{image.id}', headers=auth_headers(user))
    assert response.status_code == 200
    assert db.session.get(Image, image.id).is_active is False

    response = client.get(f'/api/media/by-rating/{rating.id}', headers=auth_headers(user))
    assert response.get_json()['images'] == []


def test_images_by_dorm_are_ordered(client, user, auth_headers, image_type_id):
    area = EduArea(name='North Campus')
    db.session.add(area)
    db.session.flush()
    location = EduLocation(edu_area_id=area.id, name='State University')
    db.session.add(location)
    db.session.flush()
    dorm = EduDorm(edu_location_id=location.id, name='Maple Hall')
    db.session.add(dorm)
    db.session.commit()

    MediaService.create_image(user.id, image_type_id, '/second.png', edu_dorm_id=dorm.id, order_by_number=2)
    MediaService.create_image(user.id, image_type_id, '/first.png', edu_dorm_id=dorm.id, order_by_number=1)

    response = client.get(f'/api/media/by-dorm/{dorm.id}', headers=auth_headers(user))
    assert [image['image_url'] for image in response.get_json()['images']] == ['/first.png', '/second.png']


def test_images_by_user_is_self_or_admin(client, user, other_user, admin, auth_headers, image_type_id):
    MediaService.create_image(user.id, image_type_id, '/mine.png')
    assert client.get(f'/api/media/by-user/{user.id}', headers=auth_headers(other_user)).status_code == 403
    assert len(client.get(f'/api/media/by-user/{user.id}', headers=auth_headers(user)).get_json()['images']) == 1
    assert client.get(f'/api/media/by-user/{user.id}', headers=auth_headers(admin)).status_code == 200


def test_moderate_image(client, user, admin, auth_headers, image_type_id):
    image = MediaService.create_image(user.id, image_type_id, '/x.png')
    response = client.put(f'/api/media/{image.id}/moderate', json={'moderationNotes': 'Checked'},
                          headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.get_json()['image']
    assert body['is_active'] is True
    assert body['moderation_notes'] == 'Checked'

    response = client.put(f'/api/media/{image.id}/moderate', json={'isActive': False}, headers=auth_headers(admin))
    assert response.get_json()['image']['is_active'] is False

    response = client.put(f'/api/media/{image.id}/moderate', json={'isActive': True}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert db.session.get(Image, image.id).is_active is False

    listing = client.get('/api/media/all', headers=auth_headers(admin)).get_json()
    assert listing['pagination']['total'] == 0
