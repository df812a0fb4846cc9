"""
Administration endpoints.

- Content management (Admin): FAQs, site content, survey questions, ads.
- Support inbox and activity logs (Admin, Support).
- Error statistics collected by the error handler (Admin).

Blueprint: admin_bp (prefix /api/admin)
"""
from flask import Blueprint, jsonify, request, g

from gladgrade.services.admin_service import AdminService
from gladgrade.utils.auth_utils import login_required, roles_required
from gladgrade.utils.error_handler import BadRequestError, ErrorHandler, NotFoundError
from gladgrade.utils.request_utils import (
    get_json_body, get_page_args, parse_bool, parse_datetime, parse_id, parse_optional_id, require_fields,
)

admin_bp = Blueprint('admin_bp', __name__)


def _id_list(data, field):
    values = data.get(field)
    if values is None:
        return None
    if not isinstance(values, list):
        raise BadRequestError(f'{field} must be a list')
    return values


def _answer_options(data):
    options = data.get('answerOptions')
    if options is None:
        return None
    if not isinstance(options, list) or not all(isinstance(option, str) and option for option in options):
        raise BadRequestError('answerOptions must be a list of non-empty strings')
    return options


@admin_bp.route('/user-count', methods=['GET'])
@login_required
def get_user_count():
    return jsonify({'success': True, 'count': AdminService.get_user_count()})


# --- FAQs ---

@admin_bp.route('/faqs', methods=['GET'])
@roles_required('Admin')
def get_faqs():
    return jsonify({'faqs': [faq.to_dict() for faq in AdminService.get_all_faqs()]})


@admin_bp.route('/faqs', methods=['POST'])
@roles_required('Admin')
def create_faq():
    data = get_json_body()
    require_fields(data, 'faq', 'faqAnswer', 'environmentTypeId')
    faq = AdminService.create_faq(
        data['faq'],
        data['faqAnswer'],
        parse_id(data['environmentTypeId'], 'environmentTypeId'),
        is_active=parse_bool(data.get('isActive', True), 'isActive'),
    )
    return jsonify({'message': 'FAQ created successfully', 'faq': faq.to_dict()}), 201


@admin_bp.route('/faqs/<faq_id>', methods=['PUT'])
@roles_required('Admin')
def update_faq(faq_id):
    faq = AdminService.update_faq(parse_id(faq_id, 'faq id'), get_json_body())
    if faq is None:
        raise NotFoundError('FAQ not found')
    return jsonify({'message': 'FAQ updated successfully', 'faq': faq.to_dict()})


@admin_bp.route('/faqs/<faq_id>', methods=['DELETE'])
@roles_required('Admin')
def delete_faq(faq_id):
    if not AdminService.delete_faq(parse_id(faq_id, 'faq id')):
        raise NotFoundError('FAQ not found')
    return jsonify({'message': 'FAQ deleted successfully'})


# --- site content ---

@admin_bp.route('/site-content', methods=['GET'])
@roles_required('Admin')
def get_site_content():
    return jsonify({'content': [document.to_dict() for document in AdminService.get_all_site_content()]})


@admin_bp.route('/site-content/<content_id>', methods=['GET'])
@roles_required('Admin')
def get_site_content_item(content_id):
    document = AdminService.get_site_content_by_id(parse_id(content_id, 'content id'))
    if document is None:
        raise NotFoundError('Site content not found')
    return jsonify({'content': document.to_dict()})


@admin_bp.route('/site-content', methods=['POST'])
@roles_required('Admin')
def create_site_content():
    data = get_json_body()
    require_fields(data, 'subject', 'content')
    document = AdminService.create_site_content(
        data['subject'],
        data['content'],
        is_active=parse_bool(data.get('isActive', True), 'isActive'),
        message_category_ids=_id_list(data, 'messageCategoryIds'),
        environment_type_ids=_id_list(data, 'environmentTypeIds'),
    )
    return jsonify({'message': 'Site content created successfully', 'content': document.to_dict()}), 201


@admin_bp.route('/site-content/<content_id>', methods=['PUT'])
@roles_required('Admin')
def update_site_content(content_id):
    data = get_json_body()
    for field in ('messageCategoryIds', 'environmentTypeIds'):
        if field in data:
            data[field] = _id_list(data, field) or []
    document = AdminService.update_site_content(parse_id(content_id, 'content id'), data)
    if document is None:
        raise NotFoundError('Site content not found')
    return jsonify({'message': 'Site content updated successfully', 'content': document.to_dict()})


@admin_bp.route('/site-content/<content_id>', methods=['DELETE'])
@roles_required('Admin')
def delete_site_content(content_id):
    if not AdminService.delete_site_content(parse_id(content_id, 'content id')):
        raise NotFoundError('Site content not found')
    return jsonify({'message': 'Site content deleted successfully'})


# --- survey questions ---

@admin_bp.route('/survey-questions', methods=['GET'])
@roles_required('Admin')
def get_survey_questions():
    return jsonify({'questions': [question.to_dict() for question in AdminService.get_all_survey_questions()]})


@admin_bp.route('/survey-questions', methods=['POST'])
@roles_required('Admin')
def create_survey_question():
    data = get_json_body()
    require_fields(data, 'question')
    question = AdminService.create_survey_question(
        data['question'],
        business_type_id=parse_optional_id(data.get('businessTypeId'), 'businessTypeId'),
        edu_category_id=parse_optional_id(data.get('eduCategoryId'), 'eduCategoryId'),
        is_active=parse_bool(data.get('isActive', True), 'isActive'),
        answer_options=_answer_options(data),
    )
    return jsonify({'message': 'Survey question created successfully', 'question': question.to_dict()}), 201


@admin_bp.route('/survey-questions/<question_id>', methods=['PUT'])
@roles_required('Admin')
def update_survey_question(question_id):
    data = get_json_body()
    if 'answerOptions' in data:
        data['answerOptions'] = _answer_options(data) or []
    question = AdminService.update_survey_question(parse_id(question_id, 'question id'), data)
    if question is None:
        raise NotFoundError('Survey question not found')
    return jsonify({'message': 'Survey question updated successfully', 'question': question.to_dict()})


@admin_bp.route('/survey-questions/<question_id>', methods=['DELETE'])
@roles_required('Admin')
def delete_survey_question(question_id):
    if not AdminService.delete_survey_question(parse_id(question_id, 'question id')):
        raise NotFoundError('Survey question not found')
    return jsonify({'message': 'Survey question deleted successfully'})


# --- support inbox ---

@admin_bp.route('/messages', methods=['GET'])
@roles_required('Admin', 'Support')
def get_messages():
    page, limit = get_page_args()
    result = AdminService.get_all_messages(
        page=page,
        limit=limit,
        is_read=parse_bool(request.args.get('isRead'), 'isRead'),
        is_replied=parse_bool(request.args.get('isReplied'), 'isReplied'),
        requires_reply=parse_bool(request.args.get('requiresReply'), 'requiresReply'),
        category=request.args.get('category'),
    )
    return jsonify(result)


@admin_bp.route('/messages/<message_id>/read', methods=['PUT'])
@roles_required('Admin', 'Support')
def mark_message_as_read(message_id):
    message = AdminService.mark_message_as_read(parse_id(message_id, 'message id'))
    if message is None:
        raise NotFoundError('Message not found')
    return jsonify({'message': 'Message marked as read', 'contactMessage': message.to_dict()})


@admin_bp.route('/messages/<message_id>/reply', methods=['POST'])
@roles_required('Admin', 'Support')
def reply_to_message(message_id):
    data = get_json_body()
    require_fields(data, 'replyText')
    message = AdminService.reply_to_message(parse_id(message_id, 'message id'), data['replyText'],
                                            g.current_user.user_id)
    if message is None:
        raise NotFoundError('Message not found')
    return jsonify({'message': 'Message replied successfully', 'contactMessage': message.to_dict()})


@admin_bp.route('/messages/<message_id>', methods=['DELETE'])
@roles_required('Admin', 'Support')
def delete_message(message_id):
    if not AdminService.delete_message(parse_id(message_id, 'message id')):
        raise NotFoundError('Message not found')
    return jsonify({'message': 'Message deleted successfully'})


# --- ads ---

@admin_bp.route('/ads', methods=['GET'])
@roles_required('Admin')
def get_ads():
    page, limit = get_page_args()
    return jsonify(AdminService.get_all_ads(page, limit, is_active=parse_bool(request.args.get('isActive'),
                                                                             'isActive')))


@admin_bp.route('/ads/<ad_id>', methods=['GET'])
@roles_required('Admin')
def get_ad(ad_id):
    ad = AdminService.get_ad_by_id(parse_id(ad_id, 'ad id'))
    if ad is None:
        raise NotFoundError('Ad not found')
    return jsonify({'ad': ad.to_dict()})


@admin_bp.route('/ads', methods=['POST'])
@roles_required('Admin')
def create_ad():
    data = get_json_body()
    require_fields(data, 'businessName', 'content')
    ad = AdminService.create_ad(data)
    return jsonify({'message': 'Ad created successfully', 'ad': ad.to_dict()}), 201


@admin_bp.route('/ads/<ad_id>', methods=['PUT'])
@roles_required('Admin')
def update_ad(ad_id):
    ad = AdminService.update_ad(parse_id(ad_id, 'ad id'), get_json_body())
    if ad is None:
        raise NotFoundError('Ad not found')
    return jsonify({'message': 'Ad updated successfully', 'ad': ad.to_dict()})


@admin_bp.route('/ads/<ad_id>', methods=['DELETE'])
@roles_required('Admin')
def delete_ad(ad_id):
    if not AdminService.delete_ad(parse_id(ad_id, 'ad id')):
        raise NotFoundError('Ad not found')
    return jsonify({'message': 'Ad deleted successfully'})


# --- activity logs ---

def _activity_log_filters():
    return {
        'event_type': request.args.get('eventType'),
        'event_category': request.args.get('eventCategory'),
        'start_date': parse_datetime(request.args.get('startDate'), 'startDate'),
        'end_date': parse_datetime(request.args.get('endDate'), 'endDate'),
    }


@admin_bp.route('/activity-logs', methods=['GET'])
@roles_required('Admin', 'Support')
def get_activity_logs():
    page, limit = get_page_args()
    return jsonify(AdminService.get_user_activity_logs(page, limit, **_activity_log_filters()))


@admin_bp.route('/activity-logs/user/<user_id>', methods=['GET'])
@roles_required('Admin', 'Support')
def get_user_activity_logs(user_id):
    page, limit = get_page_args()
    return jsonify(AdminService.get_user_activity_logs(page, limit, user_id=parse_id(user_id, 'user id'),
                                                       **_activity_log_filters()))


# --- error statistics ---

@admin_bp.route('/error-stats', methods=['GET'])
@roles_required('Admin')
def get_error_stats():
    return jsonify(ErrorHandler.get_error_stats())


@admin_bp.route('/error-stats/reset', methods=['POST'])
@roles_required('Admin')
def reset_error_stats():
    return jsonify(ErrorHandler.reset_stats())
