"""
Business sectors, business types and owned business listings.
"""
from datetime import datetime
import logging

from sqlalchemy import or_

from gladgrade import db
from gladgrade.models import BusinessSector, BusinessType, Business
from gladgrade.utils.error_handler import BadRequestError
from gladgrade.utils.pagination import QueryFilter, paginate_query
from gladgrade.utils.request_utils import apply_updates, parse_id, parse_optional_id

logger = logging.getLogger(__name__)

SECTOR_UPDATE_FIELDS = {
    'businessSectorName': 'business_sector_name',
    'isExternal': 'is_external',
    'other': 'other',
}

TYPE_UPDATE_FIELDS = {
    'businessType': 'business_type',
    'businessSectorId': 'business_sector_id',
    'isDefault': 'is_default',
    'isExternal': 'is_external',
}

BUSINESS_UPDATE_FIELDS = {
    'businessName': 'business_name',
    'businessTypeId': 'business_type_id',
    'streetAddress': 'street_address',
    'city': 'city',
    'state': 'state',
    'zipCode': 'zip_code',
    'country': 'country',
    'phone': 'phone',
    'website': 'website',
    'logoURL': 'logo_url',
    'isActive': 'is_active',
    'isVerified': 'is_verified',
}

BUSINESS_CONVERTERS = {
    'businessTypeId': lambda value: parse_optional_id(value, 'businessTypeId'),
}


class BusinessService:

    # --- sectors ---

    @staticmethod
    def get_all_sectors():
        return BusinessSector.query.order_by(BusinessSector.business_sector_name).all()

    @staticmethod
    def get_sector_by_id(sector_id):
        return db.session.get(BusinessSector, sector_id)

    @staticmethod
    def create_sector(business_sector_name, is_external=False, other=None):
        sector = BusinessSector(
            business_sector_name=business_sector_name,
            is_external=bool(is_external),
            other=other or None,
        )
        db.session.add(sector)
        db.session.commit()
        return BusinessService.get_sector_by_id(sector.id)

    @staticmethod
    def update_sector(sector_id, data):
        sector = BusinessService.get_sector_by_id(sector_id)
        if sector is None:
            return None
        apply_updates(sector, data, SECTOR_UPDATE_FIELDS)
        db.session.commit()
        return sector

    # --- types ---

    @staticmethod
    def get_all_types():
        return (BusinessType.query
                .join(BusinessSector, BusinessType.business_sector_id == BusinessSector.id)
                .order_by(BusinessSector.business_sector_name, BusinessType.business_type)
                .all())

    @staticmethod
    def get_types_by_sector(sector_id):
        return (BusinessType.query
                .filter(BusinessType.business_sector_id == sector_id)
                .order_by(BusinessType.business_type)
                .all())

    @staticmethod
    def get_type_by_id(type_id):
        return db.session.get(BusinessType, type_id)

    @staticmethod
    def create_type(business_type, business_sector_id, is_default=True, is_external=False):
        if BusinessService.get_sector_by_id(business_sector_id) is None:
            raise BadRequestError('Business sector does not exist')
        new_type = BusinessType(
            business_type=business_type,
            business_sector_id=business_sector_id,
            is_default=True if is_default is None else bool(is_default),
            is_external=bool(is_external),
        )
        db.session.add(new_type)
        db.session.commit()
        return BusinessService.get_type_by_id(new_type.id)

    @staticmethod
    def update_type(type_id, data):
        business_type = BusinessService.get_type_by_id(type_id)
        if business_type is None:
            return None
        apply_updates(business_type, data, TYPE_UPDATE_FIELDS,
                      converters={'businessSectorId': lambda value: parse_id(value, 'businessSectorId')})
        db.session.commit()
        return business_type

    # --- businesses ---

    @staticmethod
    def get_user_businesses(user_id):
        return Business.query.filter_by(user_id=user_id).order_by(Business.business_name).all()

    @staticmethod
    def get_business_by_id(business_id):
        return db.session.get(Business, business_id)

    @staticmethod
    def create_business(user_id, data):
        now = datetime.utcnow()
        business = Business(
            user_id=user_id,
            business_name=data['businessName'],
            place_id=data.get('placeId') or None,
            business_type_id=parse_optional_id(data.get('businessTypeId'), 'businessTypeId'),
            street_address=data.get('streetAddress') or '',
            city=data.get('city') or '',
            state=data.get('state') or '',
            zip_code=data.get('zipCode') or '',
            country=data.get('country') or '',
            phone=data.get('phone') or '',
            website=data.get('website') or '',
            logo_url=data.get('logoURL') or '',
            is_active=data.get('isActive', True) is not False,
            is_verified=bool(data.get('isVerified', False)),
            date_created=now,
            last_updated=now,
        )
        db.session.add(business)
        db.session.commit()
        logger.info(f"User {user_id} created business {business.id}")
        return BusinessService.get_business_by_id(business.id)

    @staticmethod
    def update_business(business_id, data, field_map=BUSINESS_UPDATE_FIELDS):
        business = BusinessService.get_business_by_id(business_id)
        if business is None:
            return None
        apply_updates(business, data, field_map, converters=BUSINESS_CONVERTERS)
        business.last_updated = datetime.utcnow()
        db.session.commit()
        return business

    @staticmethod
    def get_all_businesses(page=1, limit=10, business_type_id=None, is_active=None, is_verified=None, search=None):
        filters = QueryFilter()
        filters.add_if(business_type_id, lambda value: Business.business_type_id == value)
        filters.add_if(is_active, lambda value: Business.is_active.is_(value))
        filters.add_if(is_verified, lambda value: Business.is_verified.is_(value))
        filters.add_if(search, lambda term: or_(
            Business.business_name.ilike(f'%{term}%'),
            Business.city.ilike(f'%{term}%'),
        ))
        return paginate_query(Business.query, filters, page, limit, order_by=[Business.business_name])
