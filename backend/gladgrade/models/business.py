# backend/gladgrade/models/business.py
"""
Business taxonomy (sector -> type) and owned business listings.
"""
from datetime import datetime

from gladgrade import db


class BusinessSector(db.Model):
    __tablename__ = 'business_sector'

    id = db.Column(db.Integer, primary_key=True)
    business_sector_name = db.Column(db.String(150), nullable=False)
    is_external = db.Column(db.Boolean, nullable=False, default=False)
    other = db.Column(db.String(255), nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    types = db.relationship('BusinessType', backref='sector', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'business_sector_name': self.business_sector_name,
            'is_external': self.is_external,
            'other': self.other,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }


class BusinessType(db.Model):
    __tablename__ = 'business_types'

    id = db.Column(db.Integer, primary_key=True)
    business_type = db.Column(db.String(150), nullable=False)
    business_sector_id = db.Column(db.Integer, db.ForeignKey('business_sector.id'), nullable=False, index=True)
    is_default = db.Column(db.Boolean, nullable=False, default=True)
    is_external = db.Column(db.Boolean, nullable=False, default=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'business_type': self.business_type,
            'business_sector_id': self.business_sector_id,
            'business_sector_name': self.sector.business_sector_name if self.sector else None,
            'is_default': self.is_default,
            'is_external': self.is_external,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }


class Business(db.Model):
    __tablename__ = 'businesses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    business_name = db.Column(db.String(255), nullable=False)
    place_id = db.Column(db.String(255), nullable=True, index=True)
    business_type_id = db.Column(db.Integer, db.ForeignKey('business_types.id'), nullable=True)
    street_address = db.Column(db.String(255), default='')
    city = db.Column(db.String(100), default='')
    state = db.Column(db.String(100), default='')
    zip_code = db.Column(db.String(20), default='')
    country = db.Column(db.String(100), default='')
    phone = db.Column(db.String(50), default='')
    website = db.Column(db.String(255), default='')
    logo_url = db.Column(db.String(500), default='')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)

    business_type = db.relationship('BusinessType', lazy='joined')
    owner = db.relationship('User', lazy='select')

    def to_dict(self):
        business_type = self.business_type
        return {
            'id': self.id,
            'user_id': self.user_id,
            'business_name': self.business_name,
            'place_id': self.place_id,
            'business_type_id': self.business_type_id,
            'business_type': business_type.business_type if business_type else None,
            'business_sector_id': business_type.business_sector_id if business_type else None,
            'business_sector_name': (business_type.sector.business_sector_name
                                     if business_type and business_type.sector else None),
            'street_address': self.street_address,
            'city': self.city,
            'state': self.state,
            'zip_code': self.zip_code,
            'country': self.country,
            'phone': self.phone,
            'website': self.website,
            'logo_url': self.logo_url,
            'is_active': self.is_active,
            'is_verified': self.is_verified,
            'date_created': self.date_created.isoformat() if self.date_created else None,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }
