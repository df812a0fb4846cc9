"""
Image endpoints.

POST /upload takes a multipart form with the file in the `image` field and
optional fields imageTypeId, consumerRatingId, consumerReviewId, eduDormId and
orderByNumber. The file goes through ImageStorage and only the returned URL
is persisted. Deleting an image deactivates it.

Blueprint: media_bp (prefix /api/media)
"""
from flask import Blueprint, jsonify, request, g, current_app

from gladgrade.services.education_service import EducationService
from gladgrade.services.media_service import MediaService
from gladgrade.services.rating_service import RatingService
from gladgrade.utils.auth_utils import login_required, roles_required, ensure_owner_or_admin
from gladgrade.utils.error_handler import AppError, BadRequestError, NotFoundError
from gladgrade.utils.request_utils import (
    get_json_body, get_page_args, parse_bool, parse_id, parse_optional_id, require_fields,
)
from gladgrade.utils.storage import validate_image

media_bp = Blueprint('media_bp', __name__)


def _image_dicts(images):
    return [image.to_dict() for image in images]


@media_bp.route('/image-types', methods=['GET'])
@login_required
def get_image_types():
    return jsonify({'types': [image_type.to_dict() for image_type in MediaService.get_image_types()]})


@media_bp.route('/upload', methods=['POST'])
@login_required
def upload_image():
    file = request.files.get('image')
    validate_image(file, current_app.config['MAX_IMAGE_SIZE'])

    form = request.form
    require_fields(form, 'imageTypeId')
    image_type_id = parse_id(form['imageTypeId'], 'imageTypeId')
    rating_id = parse_optional_id(form.get('consumerRatingId'), 'consumerRatingId')
    review_id = parse_optional_id(form.get('consumerReviewId'), 'consumerReviewId')
    dorm_id = parse_optional_id(form.get('eduDormId'), 'eduDormId')
    order_by_number = parse_optional_id(form.get('orderByNumber'), 'orderByNumber') or 0

    if sum(value is not None for value in (rating_id, review_id, dorm_id)) > 1:
        raise BadRequestError('An image can be attached to at most one of rating, review or dorm')
    if MediaService.get_image_type_by_id(image_type_id) is None:
        raise BadRequestError('Image type does not exist')

    if rating_id is not None:
        rating = RatingService.get_rating_by_id(rating_id)
        if rating is None:
            raise NotFoundError('Rating not found')
        ensure_owner_or_admin(rating.user_id, 'Not authorized to add images to this rating')
    if review_id is not None:
        review = RatingService.get_review_by_id(review_id)
        if review is None:
            raise NotFoundError('Review not found')
        ensure_owner_or_admin(review.user_id, 'Not authorized to add images to this review')
    if dorm_id is not None and EducationService.get_dorm_by_id(dorm_id) is None:
        raise NotFoundError('Dorm not found')

    image_url = current_app.extensions['image_storage'].save(file)
    if not image_url:
        raise AppError('Image upload failed', 500)

    image = MediaService.create_image(
        user_id=g.current_user.user_id,
        image_type_id=image_type_id,
        image_url=image_url,
        consumer_rating_id=rating_id,
        consumer_review_id=review_id,
        edu_dorm_id=dorm_id,
        order_by_number=order_by_number,
    )
    return jsonify({'message': 'Image uploaded successfully', 'image': image.to_dict()}), 201


@media_bp.route('/<image_id>', methods=['DELETE'])
@login_required
def delete_image(image_id):
    image = MediaService.get_image_by_id(parse_id(image_id, 'image id'))
    if image is None:
        raise NotFoundError('Image not found')
    ensure_owner_or_admin(image.user_id, 'Not authorized to delete this image')
    MediaService.deactivate_image(image.id)
    return jsonify({'message': 'Image deleted successfully'})


@media_bp.route('/by-user/<user_id>', methods=['GET'])
@login_required
def get_images_by_user(user_id):
    user_id = parse_id(user_id, 'user id')
    ensure_owner_or_admin(user_id, 'Not authorized to view these images')
    return jsonify({'images': _image_dicts(MediaService.get_images_by_user(user_id))})


@media_bp.route('/by-rating/<rating_id>', methods=['GET'])
@login_required
def get_images_by_rating(rating_id):
    return jsonify({'images': _image_dicts(MediaService.get_images_by_rating(parse_id(rating_id, 'rating id')))})


@media_bp.route('/by-review/<review_id>', methods=['GET'])
@login_required
def get_images_by_review(review_id):
    return jsonify({'images': _image_dicts(MediaService.get_images_by_review(parse_id(review_id, 'review id')))})


@media_bp.route('/by-dorm/<dorm_id>', methods=['GET'])
@login_required
def get_images_by_dorm(dorm_id):
    return jsonify({'images': _image_dicts(MediaService.get_images_by_dorm(parse_id(dorm_id, 'dorm id')))})


@media_bp.route('/all', methods=['GET'])
@roles_required('Admin', 'Support')
def get_all_images():
    page, limit = get_page_args()
    result = MediaService.get_all_images(
        page=page,
        limit=limit,
        image_type_id=parse_optional_id(request.args.get('imageTypeId'), 'imageTypeId'),
    )
    return jsonify(result)


@media_bp.route('/<image_id>/moderate', methods=['PUT'])
@roles_required('Admin', 'Moderator')
def moderate_image(image_id):
    data = get_json_body()
    image = MediaService.moderate_image(
        parse_id(image_id, 'image id'),
        is_active=parse_bool(data.get('isActive'), 'isActive'),
        moderation_notes=data.get('moderationNotes'),
    )
    if image is None:
        raise NotFoundError('Image not found')
    return jsonify({'message': 'Image moderated successfully', 'image': image.to_dict()})
