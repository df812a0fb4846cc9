"""
User endpoints.

- The signed-in user's own profile, reviews, ratings, GladPoints and business
  type preferences.
- Contact messages to support.
- User administration: listing and lookup (Admin, Support); updates, deletion
  and role assignment (Admin).

Blueprint: users_bp (prefix /api/users)
"""
from flask import Blueprint, jsonify, request, g

from gladgrade.services.admin_service import AdminService
from gladgrade.services.user_service import UserService, PROFILE_UPDATE_FIELDS, USER_UPDATE_FIELDS
from gladgrade.utils.auth_utils import login_required, roles_required
from gladgrade.utils.error_handler import NotFoundError
from gladgrade.utils.request_utils import (
    get_json_body, get_page_args, parse_bool, parse_id, parse_optional_id, require_fields,
)

users_bp = Blueprint('users_bp', __name__)


# --- own profile ---

@users_bp.route('/profile', methods=['GET'])
@login_required
def get_profile():
    user = UserService.get_user_by_id(g.current_user.user_id)
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'user': user.to_dict(include_roles=True)})


@users_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    user = UserService.update_user(g.current_user.user_id, get_json_body(), PROFILE_UPDATE_FIELDS)
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict(include_roles=True)})


@users_bp.route('/profile', methods=['DELETE'])
@login_required
def delete_profile():
    user_id = g.current_user.user_id
    if not UserService.mark_user_as_deleted(user_id):
        raise NotFoundError('User not found')
    UserService.log_activity(user_id, 'account-deleted', 'account', ip_address=request.remote_addr)
    return jsonify({'message': 'Account marked for deletion successfully'})


@users_bp.route('/reviews', methods=['GET'])
@login_required
def get_my_reviews():
    return jsonify({'reviews': UserService.get_user_reviews(g.current_user.user_id)})


@users_bp.route('/ratings', methods=['GET'])
@login_required
def get_my_ratings():
    ratings = UserService.get_user_ratings(g.current_user.user_id)
    return jsonify({'ratings': [rating.to_dict() for rating in ratings]})


@users_bp.route('/points', methods=['GET'])
@login_required
def get_my_points():
    return jsonify({'points': UserService.get_user_points(g.current_user.user_id)})


# --- business type preferences ---

@users_bp.route('/business-types', methods=['GET'])
@login_required
def get_my_business_types():
    preferences = UserService.get_user_business_types(g.current_user.user_id)
    return jsonify({'businessTypes': [preference.to_dict() for preference in preferences]})


@users_bp.route('/business-types', methods=['POST'])
@login_required
def add_my_business_type():
    data = get_json_body()
    require_fields(data, 'businessTypeId')
    preference = UserService.add_user_business_type(
        g.current_user.user_id,
        parse_id(data['businessTypeId'], 'businessTypeId'),
        parse_optional_id(data.get('sortNumber'), 'sortNumber'),
    )
    return jsonify({
        'message': 'Business type added to user preferences',
        'userBusinessType': preference.to_dict(),
    }), 201


@users_bp.route('/business-types/<preference_id>', methods=['PUT'])
@login_required
def update_my_business_type(preference_id):
    data = get_json_body()
    require_fields(data, 'sortNumber')
    preference = UserService.update_user_business_type(
        parse_id(preference_id),
        g.current_user.user_id,
        parse_id(data['sortNumber'], 'sortNumber'),
    )
    return jsonify({'message': 'Business type preference updated', 'userBusinessType': preference.to_dict()})


@users_bp.route('/business-types/<preference_id>', methods=['DELETE'])
@login_required
def delete_my_business_type(preference_id):
    UserService.delete_user_business_type(parse_id(preference_id), g.current_user.user_id)
    return jsonify({'message': 'Business type removed from user preferences'})


# --- contact support ---

@users_bp.route('/messages', methods=['POST'])
@login_required
def send_message():
    data = get_json_body()
    require_fields(data, 'message')
    message = AdminService.create_message(
        user_id=g.current_user.user_id,
        message=data['message'],
        subject=data.get('subject'),
        message_category_id=parse_optional_id(data.get('messageCategoryId'), 'messageCategoryId'),
        environment_type_id=parse_optional_id(data.get('environmentTypeId'), 'environmentTypeId'),
        requires_reply=parse_bool(data.get('requiresReply', False), 'requiresReply'),
    )
    return jsonify({'message': 'Message sent successfully', 'contactMessage': message.to_dict()}), 201


# --- administration ---

@users_bp.route('/roles', methods=['GET'])
@roles_required('Admin', 'Support')
def list_roles():
    return jsonify({'roles': [role.to_dict() for role in UserService.list_roles()]})


@users_bp.route('/', methods=['GET'])
@roles_required('Admin', 'Support')
def get_all_users():
    page, limit = get_page_args()
    result = UserService.get_all_users(
        page=page,
        limit=limit,
        search=request.args.get('search'),
        role=request.args.get('role'),
    )
    return jsonify(result)


@users_bp.route('/<user_id>', methods=['GET'])
@roles_required('Admin', 'Support')
def get_user(user_id):
    user = UserService.get_user_by_id(parse_id(user_id, 'user id'))
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'user': user.to_dict(include_roles=True)})


@users_bp.route('/<user_id>', methods=['PUT'])
@roles_required('Admin')
def update_user(user_id):
    user = UserService.update_user(parse_id(user_id, 'user id'), get_json_body(), USER_UPDATE_FIELDS)
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'message': 'User updated successfully', 'user': user.to_dict(include_roles=True)})


@users_bp.route('/<user_id>', methods=['DELETE'])
@roles_required('Admin')
def delete_user(user_id):
    target_id = parse_id(user_id, 'user id')
    if not UserService.mark_user_as_deleted(target_id):
        raise NotFoundError('User not found')
    UserService.log_activity(target_id, 'account-deleted', 'admin',
                             details={'deletedBy': g.current_user.user_id}, ip_address=request.remote_addr)
    return jsonify({'message': 'User deleted successfully'})


@users_bp.route('/<user_id>/role', methods=['PUT'])
@roles_required('Admin')
def change_user_role(user_id):
    data = get_json_body()
    require_fields(data, 'roleId')
    user = UserService.change_user_role(parse_id(user_id, 'user id'), parse_id(data['roleId'], 'roleId'))
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'message': 'User role updated successfully', 'user': user.to_dict(include_roles=True)})


@users_bp.route('/<user_id>/secondary-roles', methods=['POST'])
@roles_required('Admin')
def add_secondary_role(user_id):
    data = get_json_body()
    require_fields(data, 'roleId')
    user = UserService.add_secondary_role(parse_id(user_id, 'user id'), parse_id(data['roleId'], 'roleId'))
    if user is None:
        raise NotFoundError('User not found')
    return jsonify({'message': 'Secondary role added successfully', 'user': user.to_dict(include_roles=True)})


@users_bp.route('/<user_id>/secondary-roles/<role_id>', methods=['DELETE'])
@roles_required('Admin')
def remove_secondary_role(user_id, role_id):
    if not UserService.remove_secondary_role(parse_id(user_id, 'user id'), parse_id(role_id, 'role id')):
        raise NotFoundError('Secondary role assignment not found')
    return jsonify({'message': 'Secondary role removed successfully'})
