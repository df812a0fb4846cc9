# backend/gladgrade/models/user.py
"""
User, role and account-audit models.

A user has exactly one primary role (users.primary_role_id) and any number of
secondary roles (user_secondary_roles). Accounts are never hard-deleted:
deletion flips is_deleted/is_active and writes a deleted_users row.
"""
from datetime import datetime

from gladgrade import db


class Role(db.Model):
    __tablename__ = 'roles'

    id = db.Column(db.Integer, primary_key=True)
    role = db.Column(db.String(50), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'role': self.role,
            'description': self.description,
        }


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    firebase_uid = db.Column(db.String(128), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True, index=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    telephone = db.Column(db.String(50), nullable=True)
    display_name = db.Column(db.String(150), nullable=True)
    photo_url = db.Column(db.String(500), nullable=True, default='')
    primary_role_id = db.Column(db.Integer, db.ForeignKey('roles.id'), nullable=True)
    is_guest = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)

    primary_role = db.relationship('Role', lazy='joined')
    secondary_roles = db.relationship('UserSecondaryRole', backref='user', lazy='select',
                                      cascade='all, delete-orphan')

    @property
    def role_names(self):
        names = [self.primary_role.role] if self.primary_role else []
        for assignment in self.secondary_roles:
            if assignment.role and assignment.role.role not in names:
                names.append(assignment.role.role)
        return names

    def to_dict(self, include_roles=False):
        data = {
            'id': self.id,
            'firebase_uid': self.firebase_uid,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'telephone': self.telephone,
            'display_name': self.display_name,
            'photo_url': self.photo_url,
            'primary_role_id': self.primary_role_id,
            'role': self.primary_role.role if self.primary_role else None,
            'is_guest': self.is_guest,
            'is_active': self.is_active,
            'date_created': self.date_created.isoformat() if self.date_created else None,
            'last_updated_at': self.last_updated_at.isoformat() if self.last_updated_at else None,
            'last_login_at': self.last_login_at.isoformat() if self.last_login_at else None,
        }
        if include_roles:
            data['roles'] = self.role_names
        return data

    def __repr__(self):
        return f'<User {self.id} {self.firebase_uid}>'


class UserSecondaryRole(db.Model):
    __tablename__ = 'user_secondary_roles'
    __table_args__ = (db.UniqueConstraint('user_id', 'role_id', name='uq_user_secondary_role'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    role_id = db.Column(db.Integer, db.ForeignKey('roles.id'), nullable=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    role = db.relationship('Role', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'role_id': self.role_id,
            'role': self.role.role if self.role else None,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }


class DeletedUser(db.Model):
    __tablename__ = 'deleted_users'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    deleted_datetime = db.Column(db.DateTime, default=datetime.utcnow)


class UserActivityLog(db.Model):
    __tablename__ = 'user_activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    event_type = db.Column(db.String(100), nullable=False, index=True)
    event_category = db.Column(db.String(100), nullable=True, index=True)
    details = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    occurred_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'event_type': self.event_type,
            'event_category': self.event_category,
            'details': self.details,
            'ip_address': self.ip_address,
            'occurred_at': self.occurred_at.isoformat() if self.occurred_at else None,
            'first_name': self.user.first_name if self.user else None,
            'last_name': self.user.last_name if self.user else None,
            'display_name': self.user.display_name if self.user else None,
        }


class ConsumerBusinessType(db.Model):
    """A business type a consumer has marked as a preference, with its sort position."""
    __tablename__ = 'consumer_business_types'
    __table_args__ = (db.UniqueConstraint('user_id', 'business_type_id', name='uq_consumer_business_type'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    business_type_id = db.Column(db.Integer, db.ForeignKey('business_types.id'), nullable=False)
    sort_number = db.Column(db.Integer, nullable=False, default=1)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    business_type = db.relationship('BusinessType', lazy='joined')

    def to_dict(self):
        business_type = self.business_type
        return {
            'id': self.id,
            'user_id': self.user_id,
            'business_type_id': self.business_type_id,
            'sort_number': self.sort_number,
            'business_type': business_type.business_type if business_type else None,
            'business_sector_id': business_type.business_sector_id if business_type else None,
            'business_sector_name': (business_type.sector.business_sector_name
                                     if business_type and business_type.sector else None),
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }
