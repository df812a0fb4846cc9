# backend/gladgrade/models/rating.py
"""
Consumer ratings, reviews and the GladPoints reward ledger.

consumer_glad_points carries a unique (consumer_rating_id, user_id)
constraint: a rating earns its author points at most once.
"""
from datetime import datetime

from gladgrade import db


class Rating(db.Model):
    __tablename__ = 'consumer_ratings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    place_id = db.Column(db.String(255), nullable=True, index=True)
    place_name = db.Column(db.String(255), nullable=True)
    place_address = db.Column(db.String(500), nullable=True)
    rating_value = db.Column(db.Integer, nullable=False)
    business_type_id = db.Column(db.Integer, db.ForeignKey('business_types.id'), nullable=True)
    edu_location_id = db.Column(db.Integer, db.ForeignKey('edu_locations.id'), nullable=True)
    subcategory = db.Column(db.String(150), nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User', lazy='select')
    business_type = db.relationship('BusinessType', lazy='select')

    def to_dict(self, include_user=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'place_id': self.place_id,
            'place_name': self.place_name,
            'place_address': self.place_address,
            'rating_value': self.rating_value,
            'business_type_id': self.business_type_id,
            'business_type': self.business_type.business_type if self.business_type else None,
            'edu_location_id': self.edu_location_id,
            'subcategory': self.subcategory,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }
        if include_user and self.user:
            data.update({
                'first_name': self.user.first_name,
                'last_name': self.user.last_name,
                'display_name': self.user.display_name,
            })
        return data


class Review(db.Model):
    __tablename__ = 'consumer_reviews'

    id = db.Column(db.Integer, primary_key=True)
    consumer_rating_id = db.Column(db.Integer, db.ForeignKey('consumer_ratings.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    place_id = db.Column(db.String(255), nullable=True, index=True)
    review = db.Column(db.Text, nullable=False)
    is_private = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    moderation_notes = db.Column(db.Text, nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    rating = db.relationship('Rating', lazy='joined')
    user = db.relationship('User', lazy='select')

    def to_dict(self, images=None, include_user=False):
        data = {
            'id': self.id,
            'consumer_rating_id': self.consumer_rating_id,
            'user_id': self.user_id,
            'place_id': self.place_id,
            'review': self.review,
            'is_private': self.is_private,
            'is_active': self.is_active,
            'moderation_notes': self.moderation_notes,
            'date_created': self.date_created.isoformat() if self.date_created else None,
            'rating_value': self.rating.rating_value if self.rating else None,
            'place_name': self.rating.place_name if self.rating else None,
        }
        if include_user and self.user:
            data.update({
                'first_name': self.user.first_name,
                'last_name': self.user.last_name,
                'display_name': self.user.display_name,
                'photo_url': self.user.photo_url,
            })
        if images is not None:
            data['images'] = [image.to_dict() for image in images]
        return data


class GladPoints(db.Model):
    __tablename__ = 'consumer_glad_points'
    __table_args__ = (
        db.UniqueConstraint('consumer_rating_id', 'user_id', name='uq_glad_points_rating_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    consumer_rating_id = db.Column(db.Integer, db.ForeignKey('consumer_ratings.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    points = db.Column(db.Integer, nullable=False)
    is_redeemed = db.Column(db.Boolean, nullable=False, default=False)
    is_redeemed_datetime = db.Column(db.DateTime, nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    rating = db.relationship('Rating', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'consumer_rating_id': self.consumer_rating_id,
            'user_id': self.user_id,
            'points': self.points,
            'is_redeemed': self.is_redeemed,
            'is_redeemed_datetime': self.is_redeemed_datetime.isoformat() if self.is_redeemed_datetime else None,
            'date_created': self.date_created.isoformat() if self.date_created else None,
            'place_id': self.rating.place_id if self.rating else None,
            'place_name': self.rating.place_name if self.rating else None,
        }
