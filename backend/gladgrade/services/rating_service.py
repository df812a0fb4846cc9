"""
Ratings, reviews, GladPoints and survey answers.

Deleting a rating removes its dependents children-first inside one
transaction: review images, reviews, rating images, survey answers,
GladPoints, then the rating itself.
"""
import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from gladgrade import db
from gladgrade.models import Rating, Review, Image, GladPoints, SurveyAnswer, SurveyQuestion, User
from gladgrade.utils.db_utils import transaction
from gladgrade.utils.error_handler import BadRequestError, is_unique_violation
from gladgrade.utils.pagination import QueryFilter, paginate_query
from gladgrade.utils.request_utils import apply_updates

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5

RATING_UPDATE_FIELDS = {
    'ratingValue': 'rating_value',
}

REVIEW_UPDATE_FIELDS = {
    'review': 'review',
    'isPrivate': 'is_private',
}


def validate_rating_value(value):
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise BadRequestError('ratingValue must be an integer')
    try:
        rating_value = int(value)
    except (TypeError, ValueError):
        raise BadRequestError('ratingValue must be an integer')
    if not RATING_MIN <= rating_value <= RATING_MAX:
        raise BadRequestError(f'ratingValue must be between {RATING_MIN} and {RATING_MAX}')
    return rating_value


def summarize_ratings(place_id, ratings):
    """Average and 1..5 histogram for a place.

    Stored values outside 1..5 still count toward totalRatings and
    averageRating but have no histogram bucket.
    """
    rating_counts = {value: 0 for value in range(RATING_MIN, RATING_MAX + 1)}
    if not ratings:
        return {
            'placeId': place_id,
            'averageRating': 0,
            'totalRatings': 0,
            'ratingCounts': rating_counts,
            'ratings': [],
        }

    total = sum(rating.rating_value for rating in ratings)
    for rating in ratings:
        if rating.rating_value in rating_counts:
            rating_counts[rating.rating_value] += 1

    return {
        'placeId': place_id,
        'averageRating': total / len(ratings),
        'totalRatings': len(ratings),
        'ratingCounts': rating_counts,
        'ratings': [rating.to_dict() for rating in ratings],
    }


def _active_images(column, ids):
    if not ids:
        return []
    return (Image.query
            .filter(column.in_(ids), Image.is_active.is_(True))
            .order_by(Image.order_by_number)
            .all())


class RatingService:

    @staticmethod
    def get_ratings_by_place(place_id):
        ratings = Rating.query.filter_by(place_id=place_id).order_by(Rating.date_created.desc()).all()
        return summarize_ratings(place_id, ratings)

    @staticmethod
    def get_reviews_by_place(place_id, page=1, limit=10):
        query = Review.query.join(User, Review.user_id == User.id)
        filters = QueryFilter(
            Review.place_id == place_id,
            Review.is_active.is_(True),
            Review.is_private.is_(False),
        )
        result = paginate_query(query, filters, page, limit, order_by=[Review.date_created.desc()],
                                serializer=lambda review: review)
        reviews = result['data']
        images = _active_images(Image.consumer_review_id, [review.id for review in reviews])
        result['data'] = [
            review.to_dict(images=[image for image in images if image.consumer_review_id == review.id],
                           include_user=True)
            for review in reviews
        ]
        return result

    @staticmethod
    def get_rating_by_id(rating_id):
        return db.session.get(Rating, rating_id)

    @staticmethod
    def create_rating(user_id, rating_value, place_id=None, place_name=None, place_address=None,
                      business_type_id=None, edu_location_id=None, subcategory=None):
        rating = Rating(
            user_id=user_id,
            rating_value=validate_rating_value(rating_value),
            place_id=place_id,
            place_name=place_name,
            place_address=place_address,
            business_type_id=business_type_id,
            edu_location_id=edu_location_id,
            subcategory=subcategory or None,
        )
        db.session.add(rating)
        db.session.commit()
        logger.info(f"User {user_id} rated place {place_id} with {rating.rating_value}")
        return RatingService.get_rating_by_id(rating.id)

    @staticmethod
    def update_rating(rating_id, data):
        rating = RatingService.get_rating_by_id(rating_id)
        if rating is None:
            return None
        apply_updates(rating, data, RATING_UPDATE_FIELDS, converters={'ratingValue': validate_rating_value})
        db.session.commit()
        return rating

    @staticmethod
    def delete_rating(rating_id):
        review_ids = [row.id for row in
                      Review.query.with_entities(Review.id).filter(Review.consumer_rating_id == rating_id)]
        with transaction():
            if review_ids:
                Image.query.filter(Image.consumer_review_id.in_(review_ids)).delete(synchronize_session=False)
                Review.query.filter(Review.consumer_rating_id == rating_id).delete(synchronize_session=False)
            Image.query.filter(Image.consumer_rating_id == rating_id).delete(synchronize_session=False)
            SurveyAnswer.query.filter(SurveyAnswer.consumer_rating_id == rating_id).delete(synchronize_session=False)
            GladPoints.query.filter(GladPoints.consumer_rating_id == rating_id).delete(synchronize_session=False)
            Rating.query.filter(Rating.id == rating_id).delete(synchronize_session=False)
        db.session.expire_all()
        logger.info(f"Rating {rating_id} deleted with {len(review_ids)} review(s)")
        return True

    @staticmethod
    def get_review_by_id(review_id):
        return db.session.get(Review, review_id)

    @staticmethod
    def review_with_images(review):
        return review.to_dict(images=_active_images(Image.consumer_review_id, [review.id]))

    @staticmethod
    def create_review(user_id, consumer_rating_id, review, place_id=None, is_private=False, is_active=True):
        new_review = Review(
            consumer_rating_id=consumer_rating_id,
            user_id=user_id,
            review=review,
            place_id=place_id,
            is_private=bool(is_private),
            is_active=True if is_active is None else bool(is_active),
        )
        db.session.add(new_review)
        db.session.commit()
        return RatingService.get_review_by_id(new_review.id)

    @staticmethod
    def update_review(review_id, data):
        review = RatingService.get_review_by_id(review_id)
        if review is None:
            return None
        apply_updates(review, data, REVIEW_UPDATE_FIELDS)
        db.session.commit()
        return review

    @staticmethod
    def deactivate_review(review_id):
        """Owner-initiated delete: the review stays for moderation history."""
        review = RatingService.get_review_by_id(review_id)
        if review is None:
            return False
        review.is_active = False
        db.session.commit()
        return True

    @staticmethod
    def moderate_review(review_id, is_active=None, moderation_notes=None):
        review = RatingService.get_review_by_id(review_id)
        if review is None:
            return None
        if is_active is True and not review.is_active:
            raise BadRequestError('Reactivating a review is not supported')
        if is_active is False:
            review.is_active = False
        review.moderation_notes = moderation_notes or None
        db.session.commit()
        return review

    @staticmethod
    def add_glad_points(rating_id, user_id):
        """Award the per-rating points once per (rating, user).

        A unique-constraint conflict means the points were already awarded and
        yields an informational result instead of an error.
        """
        points = current_app.config.get('GLAD_POINTS_PER_RATING', 10)
        entry = GladPoints(consumer_rating_id=rating_id, user_id=user_id, points=points, is_redeemed=False)
        db.session.add(entry)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            if not is_unique_violation(e):
                raise
            logger.info(f"Points already awarded for rating {rating_id} and user {user_id}")
            return {'message': 'Points already awarded for this rating'}
        return entry.to_dict()

    @staticmethod
    def create_survey_answers(user_id, consumer_rating_id, answers):
        """Store every answer for a rating in one transaction."""
        created = []
        with transaction() as session:
            for answer in answers:
                row = SurveyAnswer(
                    survey_question_id=answer['survey_question_id'],
                    survey_questions_answer_id=answer.get('survey_questions_answer_id'),
                    answer=answer.get('answer'),
                    consumer_rating_id=consumer_rating_id,
                    user_id=user_id,
                )
                session.add(row)
                created.append(row)
        return created

    @staticmethod
    def get_survey_questions_by_type(type_id):
        return (SurveyQuestion.query
                .filter(SurveyQuestion.business_type_id == type_id, SurveyQuestion.is_active.is_(True))
                .order_by(SurveyQuestion.id)
                .all())

    @staticmethod
    def get_survey_questions_by_edu_category(category_id):
        return (SurveyQuestion.query
                .filter(SurveyQuestion.edu_category_id == category_id, SurveyQuestion.is_active.is_(True))
                .order_by(SurveyQuestion.id)
                .all())

    @staticmethod
    def get_all_ratings(page=1, limit=10, place_id=None, user_id=None, business_type_id=None):
        filters = QueryFilter()
        filters.add_if(place_id, lambda value: Rating.place_id == value)
        filters.add_if(user_id, lambda value: Rating.user_id == value)
        filters.add_if(business_type_id, lambda value: Rating.business_type_id == value)
        return paginate_query(Rating.query, filters, page, limit, order_by=[Rating.date_created.desc()],
                              serializer=lambda rating: rating.to_dict(include_user=True))

    @staticmethod
    def get_all_reviews(page=1, limit=10, place_id=None, user_id=None, is_active=None):
        filters = QueryFilter()
        filters.add_if(place_id, lambda value: Review.place_id == value)
        filters.add_if(user_id, lambda value: Review.user_id == value)
        filters.add_if(is_active, lambda value: Review.is_active.is_(value))
        return paginate_query(Review.query, filters, page, limit, order_by=[Review.date_created.desc()],
                              serializer=lambda review: review.to_dict(include_user=True))
