"""
Business sector, business type and business listing endpoints.

Sectors and types are readable by any signed-in user and managed by Admin.
Businesses belong to the client user who created them; inactive businesses
are only visible to their owner and to Admin.

Blueprint: business_bp (prefix /api/business)
"""
from flask import Blueprint, jsonify, request, g

from gladgrade.services.business_service import BusinessService, BUSINESS_UPDATE_FIELDS
from gladgrade.utils.auth_utils import login_required, roles_required, ensure_owner_or_admin
from gladgrade.utils.error_handler import NotFoundError
from gladgrade.utils.request_utils import (
    get_json_body, get_page_args, parse_bool, parse_id, parse_optional_id, require_fields,
)

business_bp = Blueprint('business_bp', __name__)

# Listing status flags only an administrator may change
ADMIN_ONLY_BUSINESS_FIELDS = ('isActive', 'isVerified')
OWNER_BUSINESS_UPDATE_FIELDS = {
    field: column for field, column in BUSINESS_UPDATE_FIELDS.items() if field not in ADMIN_ONLY_BUSINESS_FIELDS
}


# --- sectors ---

@business_bp.route('/sectors', methods=['GET'])
@login_required
def get_sectors():
    return jsonify({'sectors': [sector.to_dict() for sector in BusinessService.get_all_sectors()]})


@business_bp.route('/sectors/<sector_id>', methods=['GET'])
@login_required
def get_sector(sector_id):
    sector = BusinessService.get_sector_by_id(parse_id(sector_id, 'sector id'))
    if sector is None:
        raise NotFoundError('Business sector not found')
    return jsonify({'sector': sector.to_dict()})


@business_bp.route('/sectors', methods=['POST'])
@roles_required('Admin')
def create_sector():
    data = get_json_body()
    require_fields(data, 'businessSectorName')
    sector = BusinessService.create_sector(
        data['businessSectorName'],
        is_external=parse_bool(data.get('isExternal', False), 'isExternal'),
        other=data.get('other'),
    )
    return jsonify({'message': 'Business sector created successfully', 'sector': sector.to_dict()}), 201


@business_bp.route('/sectors/<sector_id>', methods=['PUT'])
@roles_required('Admin')
def update_sector(sector_id):
    sector = BusinessService.update_sector(parse_id(sector_id, 'sector id'), get_json_body())
    if sector is None:
        raise NotFoundError('Business sector not found')
    return jsonify({'message': 'Business sector updated successfully', 'sector': sector.to_dict()})


# --- types ---

@business_bp.route('/types', methods=['GET'])
@login_required
def get_types():
    return jsonify({'types': [business_type.to_dict() for business_type in BusinessService.get_all_types()]})


@business_bp.route('/types/by-sector/<sector_id>', methods=['GET'])
@login_required
def get_types_by_sector(sector_id):
    types = BusinessService.get_types_by_sector(parse_id(sector_id, 'sector id'))
    return jsonify({'types': [business_type.to_dict() for business_type in types]})


@business_bp.route('/types/<type_id>', methods=['GET'])
@login_required
def get_type(type_id):
    business_type = BusinessService.get_type_by_id(parse_id(type_id, 'type id'))
    if business_type is None:
        raise NotFoundError('Business type not found')
    return jsonify({'type': business_type.to_dict()})


@business_bp.route('/types', methods=['POST'])
@roles_required('Admin')
def create_type():
    data = get_json_body()
    require_fields(data, 'businessType', 'businessSectorId')
    business_type = BusinessService.create_type(
        data['businessType'],
        parse_id(data['businessSectorId'], 'businessSectorId'),
        is_default=parse_bool(data.get('isDefault', True), 'isDefault'),
        is_external=parse_bool(data.get('isExternal', False), 'isExternal'),
    )
    return jsonify({'message': 'Business type created successfully', 'type': business_type.to_dict()}), 201


@business_bp.route('/types/<type_id>', methods=['PUT'])
@roles_required('Admin')
def update_type(type_id):
    business_type = BusinessService.update_type(parse_id(type_id, 'type id'), get_json_body())
    if business_type is None:
        raise NotFoundError('Business type not found')
    return jsonify({'message': 'Business type updated successfully', 'type': business_type.to_dict()})


# --- businesses ---

@business_bp.route('/my-businesses', methods=['GET'])
@login_required
def get_my_businesses():
    businesses = BusinessService.get_user_businesses(g.current_user.user_id)
    return jsonify({'businesses': [business.to_dict() for business in businesses]})


@business_bp.route('/businesses', methods=['POST'])
@roles_required('Client', 'Client Admin', 'Admin')
def create_business():
    data = get_json_body()
    require_fields(data, 'businessName')
    # New listings always start active and unverified
    data = {key: value for key, value in data.items() if key not in ADMIN_ONLY_BUSINESS_FIELDS}
    business = BusinessService.create_business(g.current_user.user_id, data)
    return jsonify({'message': 'Business created successfully', 'business': business.to_dict()}), 201


@business_bp.route('/businesses', methods=['GET'])
@roles_required('Admin', 'Support')
def get_all_businesses():
    page, limit = get_page_args()
    result = BusinessService.get_all_businesses(
        page=page,
        limit=limit,
        business_type_id=parse_optional_id(request.args.get('businessTypeId'), 'businessTypeId'),
        is_active=parse_bool(request.args.get('isActive'), 'isActive'),
        is_verified=parse_bool(request.args.get('isVerified'), 'isVerified'),
        search=request.args.get('search'),
    )
    return jsonify(result)


@business_bp.route('/businesses/<business_id>', methods=['GET'])
@login_required
def get_business(business_id):
    business = BusinessService.get_business_by_id(parse_id(business_id, 'business id'))
    if business is None:
        raise NotFoundError('Business not found')
    if not business.is_active and business.user_id != g.current_user.user_id and not g.current_user.is_admin:
        raise NotFoundError('Business not found')
    return jsonify({'business': business.to_dict()})


@business_bp.route('/businesses/<business_id>', methods=['PUT'])
@login_required
def update_business(business_id):
    business_id = parse_id(business_id, 'business id')
    business = BusinessService.get_business_by_id(business_id)
    if business is None:
        raise NotFoundError('Business not found')
    ensure_owner_or_admin(business.user_id, 'Not authorized to update this business')

    field_map = BUSINESS_UPDATE_FIELDS if g.current_user.is_admin else OWNER_BUSINESS_UPDATE_FIELDS
    updated = BusinessService.update_business(business_id, get_json_body(), field_map)
    return jsonify({'message': 'Business updated successfully', 'business': updated.to_dict()})
