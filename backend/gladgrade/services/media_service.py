"""
Image records and their moderation lifecycle.

Images start active. Owner deletes and moderation can only move them to
inactive; moderation notes may be set in either state. Every by-owner lookup
returns active images only.
"""
import logging

from gladgrade import db
from gladgrade.models import ImageType, Image
from gladgrade.utils.error_handler import BadRequestError
from gladgrade.utils.pagination import QueryFilter, paginate_query

logger = logging.getLogger(__name__)


class MediaService:

    @staticmethod
    def get_image_types():
        return ImageType.query.order_by(ImageType.image_type).all()

    @staticmethod
    def get_image_type_by_id(image_type_id):
        return db.session.get(ImageType, image_type_id)

    @staticmethod
    def get_image_by_id(image_id):
        return db.session.get(Image, image_id)

    @staticmethod
    def create_image(user_id, image_type_id, image_url, consumer_rating_id=None, consumer_review_id=None,
                     edu_dorm_id=None, order_by_number=0):
        if MediaService.get_image_type_by_id(image_type_id) is None:
            raise BadRequestError('Image type does not exist')
        image = Image(
            image_type_id=image_type_id,
            consumer_rating_id=consumer_rating_id,
            consumer_review_id=consumer_review_id,
            edu_dorm_id=edu_dorm_id,
            user_id=user_id,
            image_url=image_url,
            order_by_number=order_by_number or 0,
            is_active=True,
        )
        db.session.add(image)
        db.session.commit()
        logger.info(f"User {user_id} uploaded image {image.id}")
        return MediaService.get_image_by_id(image.id)

    @staticmethod
    def deactivate_image(image_id):
        image = MediaService.get_image_by_id(image_id)
        if image is None:
            return False
        image.is_active = False
        db.session.commit()
        return True

    @staticmethod
    def _active_by(column, value):
        return (Image.query
                .filter(column == value, Image.is_active.is_(True))
                .order_by(Image.order_by_number, Image.id)
                .all())

    @staticmethod
    def get_images_by_user(user_id):
        return (Image.query
                .filter(Image.user_id == user_id, Image.is_active.is_(True))
                .order_by(Image.date_created.desc())
                .all())

    @staticmethod
    def get_images_by_rating(rating_id):
        return MediaService._active_by(Image.consumer_rating_id, rating_id)

    @staticmethod
    def get_images_by_review(review_id):
        return MediaService._active_by(Image.consumer_review_id, review_id)

    @staticmethod
    def get_images_by_dorm(dorm_id):
        return MediaService._active_by(Image.edu_dorm_id, dorm_id)

    @staticmethod
    def get_all_images(page=1, limit=10, image_type_id=None):
        filters = QueryFilter(Image.is_active.is_(True))
        filters.add_if(image_type_id, lambda value: Image.image_type_id == value)
        return paginate_query(Image.query, filters, page, limit, order_by=[Image.date_created.desc()])

    @staticmethod
    def moderate_image(image_id, is_active=None, moderation_notes=None):
        image = MediaService.get_image_by_id(image_id)
        if image is None:
            return None
        if is_active is True and not image.is_active:
            raise BadRequestError('Reactivating an image is not supported')
        if is_active is False:
            image.is_active = False
        image.moderation_notes = moderation_notes or None
        db.session.commit()
        logger.info(f"Image {image_id} moderated (active={image.is_active})")
        return image
