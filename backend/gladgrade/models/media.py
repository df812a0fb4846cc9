# backend/gladgrade/models/media.py
"""
Uploaded image references.

An image row stores only the URL returned by storage. It hangs off at most
one of a rating, a review or a dorm, is soft-deleted through is_active and
can carry moderation notes in either state.
"""
from datetime import datetime

from gladgrade import db


class ImageType(db.Model):
    __tablename__ = 'image_types'

    id = db.Column(db.Integer, primary_key=True)
    image_type = db.Column(db.String(100), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'image_type': self.image_type}


class Image(db.Model):
    __tablename__ = 'image_urls'

    id = db.Column(db.Integer, primary_key=True)
    image_type_id = db.Column(db.Integer, db.ForeignKey('image_types.id'), nullable=False)
    consumer_rating_id = db.Column(db.Integer, db.ForeignKey('consumer_ratings.id'), nullable=True, index=True)
    consumer_review_id = db.Column(db.Integer, db.ForeignKey('consumer_reviews.id'), nullable=True, index=True)
    edu_dorm_id = db.Column(db.Integer, db.ForeignKey('edu_dorms.id'), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    image_url = db.Column(db.String(1000), nullable=False)
    order_by_number = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    moderation_notes = db.Column(db.Text, nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    image_type = db.relationship('ImageType', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'image_type_id': self.image_type_id,
            'image_type': self.image_type.image_type if self.image_type else None,
            'consumer_rating_id': self.consumer_rating_id,
            'consumer_review_id': self.consumer_review_id,
            'edu_dorm_id': self.edu_dorm_id,
            'user_id': self.user_id,
            'image_url': self.image_url,
            'order_by_number': self.order_by_number,
            'is_active': self.is_active,
            'moderation_notes': self.moderation_notes,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }
