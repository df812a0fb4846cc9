"""
User accounts, roles, consumer preferences and activity logging.

Deleted users stay in the table with is_deleted set; every lookup here skips
them, so a deleted account behaves as "not found".
"""
from datetime import datetime
import logging
import time

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from gladgrade import db
from gladgrade.models import (
    User, Role, UserSecondaryRole, DeletedUser, UserActivityLog, ConsumerBusinessType, BusinessType,
    Rating, Review, GladPoints, Image,
)
from gladgrade.utils.db_utils import transaction
from gladgrade.utils.error_handler import AppError, BadRequestError, ForbiddenError, NotFoundError, is_unique_violation
from gladgrade.utils.pagination import QueryFilter, paginate_query
from gladgrade.utils.request_utils import apply_updates

logger = logging.getLogger(__name__)

DEFAULT_USER_ROLE = 'User'
GUEST_ROLE = 'Guest'

# request field -> users column
USER_UPDATE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'telephone': 'telephone',
    'displayName': 'display_name',
    'photoUrl': 'photo_url',
    'isActive': 'is_active',
}

# Users may not re-activate or deactivate themselves through the profile
PROFILE_UPDATE_FIELDS = {field: column for field, column in USER_UPDATE_FIELDS.items() if field != 'isActive'}


class UserService:

    @staticmethod
    def get_user_by_id(user_id):
        return User.query.filter_by(id=user_id, is_deleted=False).first()

    @staticmethod
    def get_user_by_firebase_uid(firebase_uid):
        return User.query.filter_by(firebase_uid=firebase_uid, is_deleted=False).first()

    @staticmethod
    def get_user_by_email(email):
        return User.query.filter_by(email=email, is_deleted=False).first()

    @staticmethod
    def get_role_by_name(name):
        return Role.query.filter_by(role=name).first()

    @staticmethod
    def list_roles():
        return Role.query.order_by(Role.id).all()

    @staticmethod
    def create_user(firebase_uid, email='', first_name='', last_name='', telephone='', display_name=None,
                    photo_url='', role_name=DEFAULT_USER_ROLE, is_guest=False, is_active=True):
        role = UserService.get_role_by_name(role_name)
        if role is None:
            raise AppError(f'{role_name} role not found', 500)

        now = datetime.utcnow()
        user = User(
            firebase_uid=firebase_uid,
            email=email,
            first_name=first_name,
            last_name=last_name,
            telephone=telephone,
            display_name=display_name,
            photo_url=photo_url or '',
            primary_role_id=role.id,
            is_guest=is_guest,
            is_active=is_active,
            is_deleted=False,
            date_created=now,
            last_updated_at=now,
            last_login_at=now,
        )
        db.session.add(user)
        db.session.commit()
        logger.info(f"Created user {user.id} ({role_name})")
        return UserService.get_user_by_id(user.id)

    @staticmethod
    def get_or_create_guest_user(firebase_uid):
        """Return the user for this uid, creating a guest account on first contact.

        Returns (user, created).
        """
        existing = UserService.get_user_by_firebase_uid(firebase_uid)
        if existing:
            return existing, False

        try:
            user = UserService.create_user(
                firebase_uid=firebase_uid,
                first_name='Guest',
                display_name=f'Guest_{int(time.time() * 1000)}',
                role_name=GUEST_ROLE,
                is_guest=True,
            )
        except IntegrityError as e:
            # A concurrent guest-login for the same uid won the insert
            db.session.rollback()
            if not is_unique_violation(e):
                raise
            existing = UserService.get_user_by_firebase_uid(firebase_uid)
            if existing is None:
                raise
            return existing, False
        return user, True

    @staticmethod
    def update_user(user_id, data, field_map=USER_UPDATE_FIELDS):
        user = UserService.get_user_by_id(user_id)
        if user is None:
            return None
        apply_updates(user, data, field_map)
        user.last_updated_at = datetime.utcnow()
        db.session.commit()
        return UserService.get_user_by_id(user_id)

    @staticmethod
    def update_last_login(user_id):
        user = UserService.get_user_by_id(user_id)
        if user is None:
            return None
        user.last_login_at = datetime.utcnow()
        db.session.commit()
        return user

    @staticmethod
    def mark_user_as_deleted(user_id):
        """Soft-delete the account and record it in deleted_users."""
        user = UserService.get_user_by_id(user_id)
        if user is None:
            return False
        now = datetime.utcnow()
        with transaction() as session:
            user.is_deleted = True
            user.is_active = False
            user.last_updated_at = now
            session.add(DeletedUser(user_id=user.id, deleted_datetime=now))
        logger.info(f"User {user_id} marked as deleted")
        return True

    @staticmethod
    def change_user_role(user_id, role_id):
        user = UserService.get_user_by_id(user_id)
        if user is None:
            return None
        if db.session.get(Role, role_id) is None:
            raise BadRequestError('Role does not exist')
        user.primary_role_id = role_id
        user.last_updated_at = datetime.utcnow()
        db.session.commit()
        db.session.refresh(user)
        return user

    @staticmethod
    def add_secondary_role(user_id, role_id):
        user = UserService.get_user_by_id(user_id)
        if user is None:
            return None
        if db.session.get(Role, role_id) is None:
            raise BadRequestError('Role does not exist')
        exists = UserSecondaryRole.query.filter_by(user_id=user_id, role_id=role_id).first()
        if exists is None and user.primary_role_id != role_id:
            db.session.add(UserSecondaryRole(user_id=user_id, role_id=role_id))
            user.last_updated_at = datetime.utcnow()
            db.session.commit()
        db.session.refresh(user)
        return user

    @staticmethod
    def remove_secondary_role(user_id, role_id):
        assignment = UserSecondaryRole.query.filter_by(user_id=user_id, role_id=role_id).first()
        if assignment is None:
            return False
        db.session.delete(assignment)
        db.session.commit()
        return True

    @staticmethod
    def get_all_users(page=1, limit=10, search=None, role=None):
        query = User.query.outerjoin(Role, User.primary_role_id == Role.id)
        filters = QueryFilter(User.is_deleted.is_(False))
        filters.add_if(search, lambda term: or_(
            User.first_name.ilike(f'%{term}%'),
            User.last_name.ilike(f'%{term}%'),
            User.email.ilike(f'%{term}%'),
        ))
        filters.add_if(role, lambda name: Role.role == name)
        return paginate_query(query, filters, page, limit, order_by=[User.id.desc()])

    @staticmethod
    def get_user_reviews(user_id):
        reviews = (Review.query
                   .filter(Review.user_id == user_id, Review.is_active.is_(True))
                   .order_by(Review.date_created.desc())
                   .all())
        images = Image.query.filter(
            Image.consumer_review_id.in_([review.id for review in reviews]),
            Image.is_active.is_(True),
        ).order_by(Image.order_by_number).all() if reviews else []
        return [review.to_dict(images=[image for image in images if image.consumer_review_id == review.id])
                for review in reviews]

    @staticmethod
    def get_user_ratings(user_id):
        return (Rating.query
                .filter(Rating.user_id == user_id)
                .order_by(Rating.date_created.desc())
                .all())

    @staticmethod
    def get_user_points(user_id):
        total_points = db.session.query(func.coalesce(func.sum(GladPoints.points), 0)) \
            .filter(GladPoints.user_id == user_id).scalar()
        redeemed_points = db.session.query(func.coalesce(func.sum(GladPoints.points), 0)) \
            .filter(GladPoints.user_id == user_id, GladPoints.is_redeemed.is_(True)).scalar()
        history = (GladPoints.query
                   .filter(GladPoints.user_id == user_id)
                   .order_by(GladPoints.is_redeemed_datetime.desc().nullsfirst(), GladPoints.date_created.desc())
                   .all())
        return {
            'totalPoints': int(total_points),
            'redeemedPoints': int(redeemed_points),
            'availablePoints': int(total_points) - int(redeemed_points),
            'pointsHistory': [entry.to_dict() for entry in history],
        }

    @staticmethod
    def get_user_business_types(user_id):
        return (ConsumerBusinessType.query
                .filter_by(user_id=user_id)
                .order_by(ConsumerBusinessType.sort_number)
                .all())

    @staticmethod
    def add_user_business_type(user_id, business_type_id, sort_number=None):
        if db.session.get(BusinessType, business_type_id) is None:
            raise BadRequestError('Business type does not exist')
        existing = ConsumerBusinessType.query.filter_by(user_id=user_id, business_type_id=business_type_id).first()
        if existing:
            raise BadRequestError('This business type is already in user preferences')

        if not sort_number:
            max_sort = db.session.query(func.max(ConsumerBusinessType.sort_number)) \
                .filter(ConsumerBusinessType.user_id == user_id).scalar()
            sort_number = (max_sort or 0) + 1

        preference = ConsumerBusinessType(user_id=user_id, business_type_id=business_type_id,
                                          sort_number=sort_number)
        db.session.add(preference)
        db.session.commit()
        return db.session.get(ConsumerBusinessType, preference.id)

    @staticmethod
    def _get_owned_preference(preference_id, user_id, action):
        preference = db.session.get(ConsumerBusinessType, preference_id)
        if preference is None:
            raise NotFoundError('Business type preference not found')
        if preference.user_id != user_id:
            raise ForbiddenError(f'Not authorized to {action} this preference')
        return preference

    @staticmethod
    def update_user_business_type(preference_id, user_id, sort_number):
        preference = UserService._get_owned_preference(preference_id, user_id, 'update')
        preference.sort_number = sort_number
        db.session.commit()
        return preference

    @staticmethod
    def delete_user_business_type(preference_id, user_id):
        preference = UserService._get_owned_preference(preference_id, user_id, 'delete')
        db.session.delete(preference)
        db.session.commit()
        return True

    @staticmethod
    def log_activity(user_id, event_type, event_category=None, details=None, ip_address=None):
        entry = UserActivityLog(
            user_id=user_id,
            event_type=event_type,
            event_category=event_category,
            details=details,
            ip_address=ip_address,
        )
        db.session.add(entry)
        db.session.commit()
        return entry
