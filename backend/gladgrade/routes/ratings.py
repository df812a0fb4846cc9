"""
Rating, review and survey endpoints.

A rating earns its author GladPoints once. Ratings and reviews are edited or
deleted by their author or by Admin; deleting a rating removes everything
that hangs off it, deleting a review only deactivates it.

Blueprint: ratings_bp (prefix /api/ratings)
"""
from flask import Blueprint, jsonify, request, g

from gladgrade.services.rating_service import RatingService
from gladgrade.utils.auth_utils import login_required, roles_required, ensure_owner_or_admin
from gladgrade.utils.error_handler import BadRequestError, ForbiddenError, NotFoundError
from gladgrade.utils.request_utils import (
    get_json_body, get_page_args, parse_bool, parse_id, parse_optional_id, require_fields,
)

ratings_bp = Blueprint('ratings_bp', __name__)


def _get_rating_or_404(rating_id):
    rating = RatingService.get_rating_by_id(parse_id(rating_id, 'rating id'))
    if rating is None:
        raise NotFoundError('Rating not found')
    return rating


def _get_review_or_404(review_id):
    review = RatingService.get_review_by_id(parse_id(review_id, 'review id'))
    if review is None:
        raise NotFoundError('Review not found')
    return review


# --- by place ---

@ratings_bp.route('/by-place/<place_id>', methods=['GET'])
@login_required
def get_ratings_by_place(place_id):
    return jsonify({'ratings': RatingService.get_ratings_by_place(place_id)})


@ratings_bp.route('/reviews/by-place/<place_id>', methods=['GET'])
@login_required
def get_reviews_by_place(place_id):
    page, limit = get_page_args()
    return jsonify(RatingService.get_reviews_by_place(place_id, page, limit))


# --- ratings ---

@ratings_bp.route('/', methods=['POST'])
@login_required
def create_rating():
    data = get_json_body()
    require_fields(data, 'ratingValue')
    user_id = g.current_user.user_id

    rating = RatingService.create_rating(
        user_id=user_id,
        rating_value=data['ratingValue'],
        place_id=data.get('placeId'),
        place_name=data.get('placeName'),
        place_address=data.get('placeAddress'),
        business_type_id=parse_optional_id(data.get('businessTypeId'), 'businessTypeId'),
        edu_location_id=parse_optional_id(data.get('eduLocationId'), 'eduLocationId'),
        subcategory=data.get('subcategory'),
    )
    glad_points = RatingService.add_glad_points(rating.id, user_id)
    return jsonify({
        'message': 'Rating created successfully',
        'rating': rating.to_dict(),
        'gladPoints': glad_points,
    }), 201


@ratings_bp.route('/<rating_id>', methods=['PUT'])
@login_required
def update_rating(rating_id):
    rating = _get_rating_or_404(rating_id)
    ensure_owner_or_admin(rating.user_id, 'Not authorized to update this rating')
    updated = RatingService.update_rating(rating.id, get_json_body())
    return jsonify({'message': 'Rating updated successfully', 'rating': updated.to_dict()})


@ratings_bp.route('/<rating_id>', methods=['DELETE'])
@login_required
def delete_rating(rating_id):
    rating = _get_rating_or_404(rating_id)
    ensure_owner_or_admin(rating.user_id, 'Not authorized to delete this rating')
    RatingService.delete_rating(rating.id)
    return jsonify({'message': 'Rating deleted successfully'})


# --- reviews ---

@ratings_bp.route('/reviews', methods=['POST'])
@login_required
def create_review():
    data = get_json_body()
    require_fields(data, 'consumerRatingId', 'review')
    rating = _get_rating_or_404(data['consumerRatingId'])
    if rating.user_id != g.current_user.user_id:
        raise ForbiddenError('Not authorized to create a review for this rating')

    review = RatingService.create_review(
        user_id=g.current_user.user_id,
        consumer_rating_id=rating.id,
        review=data['review'],
        place_id=data.get('placeId') or rating.place_id,
        is_private=parse_bool(data.get('isPrivate', False), 'isPrivate'),
    )
    return jsonify({'message': 'Review created successfully', 'review': RatingService.review_with_images(review)}), 201


@ratings_bp.route('/reviews/<review_id>', methods=['PUT'])
@login_required
def update_review(review_id):
    review = _get_review_or_404(review_id)
    ensure_owner_or_admin(review.user_id, 'Not authorized to update this review')
    data = get_json_body()
    if 'isPrivate' in data:
        data['isPrivate'] = parse_bool(data['isPrivate'], 'isPrivate')
    updated = RatingService.update_review(review.id, data)
    return jsonify({'message': 'Review updated successfully', 'review': RatingService.review_with_images(updated)})


@ratings_bp.route('/reviews/<review_id>', methods=['DELETE'])
@login_required
def delete_review(review_id):
    review = _get_review_or_404(review_id)
    ensure_owner_or_admin(review.user_id, 'Not authorized to delete this review')
    RatingService.deactivate_review(review.id)
    return jsonify({'message': 'Review deleted successfully'})


# --- surveys ---

@ratings_bp.route('/survey-answers', methods=['POST'])
@login_required
def submit_survey_answers():
    data = get_json_body()
    require_fields(data, 'consumerRatingId')
    answers = data.get('answers')
    if not isinstance(answers, list) or not answers:
        raise BadRequestError('answers must be a non-empty list')

    rating = _get_rating_or_404(data['consumerRatingId'])
    if rating.user_id != g.current_user.user_id:
        raise ForbiddenError('Not authorized to submit answers for this rating')

    parsed = []
    for answer in answers:
        if not isinstance(answer, dict):
            raise BadRequestError('Each answer must be an object')
        require_fields(answer, 'surveyQuestionId')
        parsed.append({
            'survey_question_id': parse_id(answer['surveyQuestionId'], 'surveyQuestionId'),
            'survey_questions_answer_id': parse_optional_id(answer.get('surveyQuestionsAnswerId'),
                                                            'surveyQuestionsAnswerId'),
            'answer': answer.get('answer'),
        })

    saved = RatingService.create_survey_answers(g.current_user.user_id, rating.id, parsed)
    return jsonify({
        'message': 'Survey answers submitted successfully',
        'answers': [answer.to_dict() for answer in saved],
    }), 201


@ratings_bp.route('/survey-questions/by-type/<type_id>', methods=['GET'])
@login_required
def get_survey_questions_by_type(type_id):
    questions = RatingService.get_survey_questions_by_type(parse_id(type_id, 'type id'))
    return jsonify({'questions': [question.to_dict() for question in questions]})


@ratings_bp.route('/survey-questions/by-edu-category/<category_id>', methods=['GET'])
@login_required
def get_survey_questions_by_edu_category(category_id):
    questions = RatingService.get_survey_questions_by_edu_category(parse_id(category_id, 'category id'))
    return jsonify({'questions': [question.to_dict() for question in questions]})


# --- administration ---

@ratings_bp.route('/all', methods=['GET'])
@roles_required('Admin', 'Support')
def get_all_ratings():
    page, limit = get_page_args()
    result = RatingService.get_all_ratings(
        page=page,
        limit=limit,
        place_id=request.args.get('placeId'),
        user_id=parse_optional_id(request.args.get('userId'), 'userId'),
        business_type_id=parse_optional_id(request.args.get('businessTypeId'), 'businessTypeId'),
    )
    return jsonify(result)


@ratings_bp.route('/reviews/all', methods=['GET'])
@roles_required('Admin', 'Support')
def get_all_reviews():
    page, limit = get_page_args()
    result = RatingService.get_all_reviews(
        page=page,
        limit=limit,
        place_id=request.args.get('placeId'),
        user_id=parse_optional_id(request.args.get('userId'), 'userId'),
        is_active=parse_bool(request.args.get('isActive'), 'isActive'),
    )
    return jsonify(result)


@ratings_bp.route('/reviews/<review_id>/moderate', methods=['PUT'])
@roles_required('Admin', 'Moderator')
def moderate_review(review_id):
    data = get_json_body()
    review = RatingService.moderate_review(
        parse_id(review_id, 'review id'),
        is_active=parse_bool(data.get('isActive'), 'isActive'),
        moderation_notes=data.get('moderationNotes'),
    )
    if review is None:
        raise NotFoundError('Review not found')
    return jsonify({'message': 'Review moderated successfully', 'review': review.to_dict()})
