import uuid

import pytest
from flask_jwt_extended import create_access_token

from gladgrade import create_app, db
from gladgrade.models import BusinessSector, BusinessType, ImageType
from gladgrade.services.user_service import UserService
from gladgrade.utils.error_handler import ErrorHandler
from gladgrade.utils.init_db import init_reference_data


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'AUTH_PROVIDER': 'jwt',
        'RATELIMIT_ENABLED': False,
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'S3_BUCKET_NAME': None,
        'APP_ENV': 'test',
        'LOG_FILE': None,
    })
    with app.app_context():
        db.create_all()
        init_reference_data()
        ErrorHandler.reset_stats()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(role='User', first_name='Test', last_name='User', **kwargs):
        uid = kwargs.pop('firebase_uid', None) or f"uid-{uuid.uuid4().hex[:12]}"
        return UserService.create_user(
            firebase_uid=uid,
            email=f"{uid}@example.com",
            first_name=first_name,
            last_name=last_name,
            display_name=f"{first_name} {last_name}",
            role_name=role,
            **kwargs,
        )
    return _make_user


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=user.firebase_uid)
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user(first_name='Other')


@pytest.fixture
def admin(make_user):
    return make_user(role='Admin', first_name='Ada')


@pytest.fixture
def business_type(app):
    sector = BusinessSector(business_sector_name='Food & Drink')
    db.session.add(sector)
    db.session.flush()
    business_type = BusinessType(business_type='Restaurant', business_sector_id=sector.id)
    db.session.add(business_type)
    db.session.commit()
    return business_type


@pytest.fixture
def image_type_id(app):
    return ImageType.query.filter_by(image_type='Review').one().id
