"""
Education directory endpoints: areas, locations, dorms, professors,
departments, class codes and the internet/security/social lists.
All reads need a signed-in user; areas and locations are managed by Admin.

Blueprint: education_bp (prefix /api/education)
"""
from flask import Blueprint, jsonify

from gladgrade.services.education_service import EducationService
from gladgrade.utils.auth_utils import login_required, roles_required
from gladgrade.utils.error_handler import NotFoundError
from gladgrade.utils.request_utils import get_json_body, parse_bool, parse_id, require_fields

education_bp = Blueprint('education_bp', __name__)


def _dicts(rows):
    return [row.to_dict() for row in rows]


# --- areas ---

@education_bp.route('/areas', methods=['GET'])
@login_required
def get_areas():
    return jsonify({'areas': _dicts(EducationService.get_all_areas())})


@education_bp.route('/areas/<area_id>', methods=['GET'])
@login_required
def get_area(area_id):
    area = EducationService.get_area_by_id(parse_id(area_id, 'area id'))
    if area is None:
        raise NotFoundError('Education area not found')
    return jsonify({'area': area.to_dict()})


@education_bp.route('/areas', methods=['POST'])
@roles_required('Admin')
def create_area():
    data = get_json_body()
    require_fields(data, 'name')
    area = EducationService.create_area(
        data['name'],
        is_active=parse_bool(data.get('isActive', True), 'isActive'),
        is_external=parse_bool(data.get('isExternal', False), 'isExternal'),
    )
    return jsonify({'message': 'Education area created successfully', 'area': area.to_dict()}), 201


@education_bp.route('/areas/<area_id>', methods=['PUT'])
@roles_required('Admin')
def update_area(area_id):
    area = EducationService.update_area(parse_id(area_id, 'area id'), get_json_body())
    if area is None:
        raise NotFoundError('Education area not found')
    return jsonify({'message': 'Education area updated successfully', 'area': area.to_dict()})


# --- locations ---

@education_bp.route('/locations', methods=['GET'])
@login_required
def get_locations():
    return jsonify({'locations': _dicts(EducationService.get_all_locations())})


@education_bp.route('/locations/by-area/<area_id>', methods=['GET'])
@login_required
def get_locations_by_area(area_id):
    return jsonify({'locations': _dicts(EducationService.get_locations_by_area(parse_id(area_id, 'area id')))})


@education_bp.route('/locations/<location_id>', methods=['GET'])
@login_required
def get_location(location_id):
    location = EducationService.get_location_by_id(parse_id(location_id, 'location id'))
    if location is None:
        raise NotFoundError('Location not found')
    return jsonify({'location': location.to_dict()})


@education_bp.route('/locations', methods=['POST'])
@roles_required('Admin')
def create_location():
    data = get_json_body()
    require_fields(data, 'eduAreaId', 'name')
    location = EducationService.create_location(
        parse_id(data['eduAreaId'], 'eduAreaId'),
        data['name'],
        place_id=data.get('placeId'),
        is_active=parse_bool(data.get('isActive', True), 'isActive'),
        is_external=parse_bool(data.get('isExternal', False), 'isExternal'),
    )
    return jsonify({'message': 'Location created successfully', 'location': location.to_dict()}), 201


@education_bp.route('/locations/<location_id>', methods=['PUT'])
@roles_required('Admin')
def update_location(location_id):
    location = EducationService.update_location(parse_id(location_id, 'location id'), get_json_body())
    if location is None:
        raise NotFoundError('Location not found')
    return jsonify({'message': 'Location updated successfully', 'location': location.to_dict()})


# --- dorms ---

@education_bp.route('/dorms', methods=['GET'])
@login_required
def get_dorms():
    return jsonify({'dorms': EducationService.get_all_dorms()})


@education_bp.route('/dorms/by-location/<location_id>', methods=['GET'])
@login_required
def get_dorms_by_location(location_id):
    return jsonify({'dorms': EducationService.get_dorms_by_location(parse_id(location_id, 'location id'))})


@education_bp.route('/dorms/<dorm_id>', methods=['GET'])
@login_required
def get_dorm(dorm_id):
    dorm = EducationService.get_dorm_by_id(parse_id(dorm_id, 'dorm id'))
    if dorm is None:
        raise NotFoundError('Dorm not found')
    return jsonify({'dorm': dorm})


# --- professors ---

@education_bp.route('/professors', methods=['GET'])
@login_required
def get_professors():
    return jsonify({'professors': _dicts(EducationService.get_all_professors())})


@education_bp.route('/professors/by-department/<department_id>', methods=['GET'])
@login_required
def get_professors_by_department(department_id):
    professors = EducationService.get_professors_by_department(parse_id(department_id, 'department id'))
    return jsonify({'professors': _dicts(professors)})


@education_bp.route('/professors/<professor_id>', methods=['GET'])
@login_required
def get_professor(professor_id):
    professor = EducationService.get_professor_by_id(parse_id(professor_id, 'professor id'))
    if professor is None:
        raise NotFoundError('Professor not found')
    return jsonify({'professor': professor.to_dict()})


@education_bp.route('/professors/<professor_id>/courses', methods=['GET'])
@login_required
def get_professor_courses(professor_id):
    courses = EducationService.get_professor_courses(parse_id(professor_id, 'professor id'))
    return jsonify({'courses': _dicts(courses)})


# --- departments and class codes ---

@education_bp.route('/departments', methods=['GET'])
@login_required
def get_departments():
    return jsonify({'departments': _dicts(EducationService.get_all_departments())})


@education_bp.route('/class-codes', methods=['GET'])
@login_required
def get_class_codes():
    return jsonify({'classCodes': _dicts(EducationService.get_all_class_codes())})


@education_bp.route('/class-codes/by-department/<department_id>', methods=['GET'])
@login_required
def get_class_codes_by_department(department_id):
    class_codes = EducationService.get_class_codes_by_department(parse_id(department_id, 'department id'))
    return jsonify({'classCodes': _dicts(class_codes)})


# --- reference lists ---

@education_bp.route('/internet', methods=['GET'])
@login_required
def get_internet():
    return jsonify({'internet': _dicts(EducationService.get_all_internet())})


@education_bp.route('/security', methods=['GET'])
@login_required
def get_security():
    return jsonify({'security': _dicts(EducationService.get_all_security())})


@education_bp.route('/social', methods=['GET'])
@login_required
def get_social():
    return jsonify({'social': _dicts(EducationService.get_all_social())})
