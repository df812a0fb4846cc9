"""
Authentication and authorization.

- Identity providers verify bearer tokens and create accounts. Firebase is
  the production provider; the JWT provider (Flask-JWT-Extended tokens whose
  subject is the uid) serves local development and tests.
- resolve_roles() maps a token subject to the internal user and its roles.
- @login_required and @roles_required(...) guard route handlers and leave the
  resolved user in g.current_user.
"""
from functools import wraps
import logging
import threading
import uuid

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials
from firebase_admin.exceptions import FirebaseError
from flask import request, g, current_app
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from gladgrade.utils.error_handler import (
    AppError, BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'Admin'


class FirebaseIdentityProvider:
    """Verifies Firebase ID tokens. The SDK app is initialized on first use."""

    APP_NAME = 'gladgrade'

    def __init__(self, project_id, credentials_path=None):
        self.project_id = project_id
        self.credentials_path = credentials_path
        self._app = None
        self._lock = threading.Lock()

    def ensure_initialized(self):
        if self._app is not None:
            return self._app
        with self._lock:
            if self._app is None:
                try:
                    self._app = firebase_admin.get_app(self.APP_NAME)
                except ValueError:
                    cred = (credentials.Certificate(self.credentials_path)
                            if self.credentials_path else credentials.ApplicationDefault())
                    self._app = firebase_admin.initialize_app(
                        cred, {'projectId': self.project_id}, name=self.APP_NAME)
                logger.info(f"Firebase Admin initialized for project {self.project_id}")
        return self._app

    def verify_token(self, token):
        app = self.ensure_initialized()
        try:
            decoded = firebase_auth.verify_id_token(token, app=app)
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError) as e:
            logger.warning(f"Token verification failed: {e}")
            raise UnauthorizedError('Invalid token', original=e)
        return decoded['uid']

    def create_account(self, email, password, display_name=None, phone_number=None):
        app = self.ensure_initialized()
        try:
            record = firebase_auth.create_user(
                email=email,
                password=password,
                display_name=display_name or None,
                phone_number=phone_number or None,
                app=app,
            )
        except firebase_auth.EmailAlreadyExistsError as e:
            raise ConflictError('Email already registered', original=e)
        except ValueError as e:
            raise BadRequestError(str(e), original=e)
        except FirebaseError as e:
            raise AppError('Error creating account', 500, original=e)
        return record.uid


class JwtIdentityProvider:
    """Accepts access tokens minted by Flask-JWT-Extended; the token subject is the uid."""

    def verify_token(self, token):
        try:
            decoded = decode_token(token)
        except (PyJWTError, JWTExtendedException) as e:
            logger.warning(f"Token verification failed: {e}")
            raise UnauthorizedError('Invalid token', original=e)
        return decoded['sub']

    def create_account(self, email, password, display_name=None, phone_number=None):
        return f"local-{uuid.uuid4().hex}"


def build_identity_provider(app):
    provider = app.config.get('AUTH_PROVIDER', 'firebase')
    if provider == 'jwt':
        return JwtIdentityProvider()
    if provider == 'firebase':
        return FirebaseIdentityProvider(app.config['FIREBASE_PROJECT_ID'], app.config.get('FIREBASE_CREDENTIALS'))
    raise ValueError(f"Unknown AUTH_PROVIDER: {provider}")


def get_identity_provider():
    return current_app.extensions['identity_provider']


class CurrentUser:
    """The authenticated actor of a request."""

    def __init__(self, user_id, uid, primary_role_id, roles, is_active=True):
        self.user_id = user_id
        self.uid = uid
        self.primary_role_id = primary_role_id
        self.roles = roles
        self.is_active = is_active

    def has_any_role(self, allowed):
        return any(role in allowed for role in self.roles)

    @property
    def is_admin(self):
        return ADMIN_ROLE in self.roles

    def to_dict(self):
        return {
            'userId': self.user_id,
            'uid': self.uid,
            'primaryRoleId': self.primary_role_id,
            'roles': list(self.roles),
        }


def resolve_roles(uid):
    """Look up the user for a token subject. Returns None when no live user row exists."""
    from gladgrade.models import User

    user = User.query.filter_by(firebase_uid=uid, is_deleted=False).first()
    if user is None:
        return None
    return CurrentUser(user.id, uid, user.primary_role_id, user.role_names, user.is_active)


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    return auth_header[len('Bearer '):].strip() or None


def authenticate_request():
    """Verify the bearer token and resolve the actor, or raise 401/403/404."""
    token = _bearer_token()
    if not token:
        raise UnauthorizedError('No token provided')
    uid = get_identity_provider().verify_token(token)
    current = resolve_roles(uid)
    if current is None:
        raise NotFoundError('User not found')
    if not current.is_active:
        raise ForbiddenError('User account is inactive')
    return current


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.current_user = authenticate_request()
        return fn(*args, **kwargs)
    return wrapper


def roles_required(*allowed_roles):
    """Allow the call only when the actor holds at least one of allowed_roles."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not g.current_user.has_any_role(allowed_roles):
                logger.warning(f"User {g.current_user.user_id} lacks roles {allowed_roles} for {request.path}")
                raise ForbiddenError('Insufficient permissions')
            return fn(*args, **kwargs)
        return login_required(wrapper)
    return decorator


def ensure_owner_or_admin(owner_id, message='Not authorized to modify this resource'):
    if owner_id != g.current_user.user_id and not g.current_user.is_admin:
        raise ForbiddenError(message)
