"""
Authentication endpoints.

Sign-in, phone verification and token refresh happen in the client SDK; the
matching endpoints here only answer with a pointer to it. Registration and
guest login create the internal user row that every other endpoint resolves
the token subject against.

Blueprint: auth_bp (prefix /api/auth)
"""
from flask import Blueprint, jsonify, request, g, current_app

from gladgrade import limiter
from gladgrade.services.user_service import UserService
from gladgrade.utils.auth_utils import login_required, get_identity_provider
from gladgrade.utils.error_handler import BadRequestError, NotFoundError
from gladgrade.utils.request_utils import get_json_body, require_fields

auth_bp = Blueprint('auth_bp', __name__)


def _client_sdk_notice(action, tip):
    return jsonify({
        'message': f'{action} endpoint (handled by Firebase client SDK)',
        'tip': tip,
    })


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("20 per hour")
def register():
    data = get_json_body()
    require_fields(data, 'email', 'password', 'firstName', 'lastName')

    display_name = f"{data['firstName']} {data['lastName']}"
    telephone = data.get('telephone') or ''
    uid = get_identity_provider().create_account(
        email=data['email'],
        password=data['password'],
        display_name=display_name,
        phone_number=telephone or None,
    )
    user = UserService.create_user(
        firebase_uid=uid,
        email=data['email'],
        first_name=data['firstName'],
        last_name=data['lastName'],
        telephone=telephone,
        display_name=display_name,
    )
    UserService.log_activity(user.id, 'register', 'auth', ip_address=request.remote_addr)
    current_app.logger.info(f"Registered user {user.id} ({user.email})")
    return jsonify({'message': 'User registered successfully', 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    return _client_sdk_notice('Login', 'Handle actual login in the mobile app using Firebase Auth SDK')


@auth_bp.route('/login-with-phone', methods=['POST'])
def login_with_phone():
    return _client_sdk_notice('Phone login', 'Handle phone verification in the mobile app using Firebase Auth SDK')


@auth_bp.route('/verify-phone', methods=['POST'])
def verify_phone():
    return _client_sdk_notice(
        'Phone verification',
        'Handle verification code confirmation in the mobile app using Firebase Auth SDK',
    )


@auth_bp.route('/refresh-token', methods=['POST'])
def refresh_token():
    return _client_sdk_notice('Token refresh', 'Handle token refresh in the mobile app using Firebase Auth SDK')


@auth_bp.route('/guest-login', methods=['POST'])
def guest_login():
    """Get or create the guest user for an anonymous client-side sign-in."""
    firebase_uid = get_json_body().get('firebaseUid')
    if not firebase_uid:
        raise BadRequestError('Firebase UID is required')

    user, created = UserService.get_or_create_guest_user(str(firebase_uid))
    UserService.log_activity(user.id, 'guest-login', 'auth', details={'created': created},
                             ip_address=request.remote_addr)
    return jsonify({'message': 'Guest login successful', 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    UserService.update_last_login(g.current_user.user_id)
    UserService.log_activity(g.current_user.user_id, 'logout', 'auth', ip_address=request.remote_addr)
    return jsonify({'message': 'Logout successful'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    user = UserService.get_user_by_id(g.current_user.user_id)
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'user': user.to_dict(include_roles=True)})
