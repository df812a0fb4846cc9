# backend/gladgrade/models/admin.py
"""
Site administration content: FAQs, site page documents (linked to message
categories and environment types), ads and contact messages.
"""
from datetime import datetime

from gladgrade import db


def _iso(value):
    return value.isoformat() if value else None


site_page_document_category_rel = db.Table(
    'site_page_document_category_rel',
    db.Column('site_page_document_id', db.Integer, db.ForeignKey('site_page_documents.id'), primary_key=True),
    db.Column('message_category_id', db.Integer, db.ForeignKey('message_categories.id'), primary_key=True),
)

site_page_documents_used_in_rel = db.Table(
    'site_page_documents_used_in_rel',
    db.Column('site_page_document_id', db.Integer, db.ForeignKey('site_page_documents.id'), primary_key=True),
    db.Column('environment_type_id', db.Integer, db.ForeignKey('environment_types.id'), primary_key=True),
)


class EnvironmentType(db.Model):
    """Where content is shown: consumer app, client portal, admin console, ..."""
    __tablename__ = 'environment_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class MessageCategory(db.Model):
    __tablename__ = 'message_categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class Faq(db.Model):
    __tablename__ = 'faqs'

    id = db.Column(db.Integer, primary_key=True)
    faq = db.Column(db.Text, nullable=False)
    faq_answer = db.Column(db.Text, nullable=False)
    environment_type_id = db.Column(db.Integer, db.ForeignKey('environment_types.id'), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    environment_type = db.relationship('EnvironmentType', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'faq': self.faq,
            'faq_answer': self.faq_answer,
            'environment_type_id': self.environment_type_id,
            'environment_type': self.environment_type.name if self.environment_type else None,
            'is_active': self.is_active,
            'date_created': _iso(self.date_created),
        }


class SitePageDocument(db.Model):
    __tablename__ = 'site_page_documents'

    id = db.Column(db.Integer, primary_key=True)
    subject = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)
    active_since_datetime = db.Column(db.DateTime, default=datetime.utcnow)

    categories = db.relationship('MessageCategory', secondary=site_page_document_category_rel,
                                 lazy='select', order_by='MessageCategory.id')
    environment_types = db.relationship('EnvironmentType', secondary=site_page_documents_used_in_rel,
                                        lazy='select', order_by='EnvironmentType.id')

    def to_dict(self):
        return {
            'id': self.id,
            'subject': self.subject,
            'content': self.content,
            'is_active': self.is_active,
            'date_created': _iso(self.date_created),
            'active_since_datetime': _iso(self.active_since_datetime),
            'categories': [category.to_dict() for category in self.categories],
            'environment_types': [environment.to_dict() for environment in self.environment_types],
        }


class Ad(db.Model):
    __tablename__ = 'ads'

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    business_telephone = db.Column(db.String(50), default='')
    content = db.Column(db.Text, nullable=False)
    expiration_date = db.Column(db.DateTime, nullable=True)
    image_url = db.Column(db.String(1000), default='')
    url = db.Column(db.String(1000), default='')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'business_name': self.business_name,
            'business_telephone': self.business_telephone,
            'content': self.content,
            'expiration_date': _iso(self.expiration_date),
            'image_url': self.image_url,
            'url': self.url,
            'is_active': self.is_active,
            'date_created': _iso(self.date_created),
        }


class Message(db.Model):
    """A contact message sent to support, with its read/reply workflow."""
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    message_category_id = db.Column(db.Integer, db.ForeignKey('message_categories.id'), nullable=True)
    environment_type_id = db.Column(db.Integer, db.ForeignKey('environment_types.id'), nullable=True)
    subject = db.Column(db.String(255), nullable=True)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    is_replied = db.Column(db.Boolean, nullable=False, default=False)
    requires_reply = db.Column(db.Boolean, nullable=False, default=False)
    reply_text = db.Column(db.Text, nullable=True)
    replied_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    replied_at = db.Column(db.DateTime, nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    category = db.relationship('MessageCategory', lazy='joined')
    environment_type = db.relationship('EnvironmentType', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'message_category_id': self.message_category_id,
            'category': self.category.name if self.category else None,
            'environment_type_id': self.environment_type_id,
            'environment_type': self.environment_type.name if self.environment_type else None,
            'subject': self.subject,
            'message': self.message,
            'is_read': self.is_read,
            'is_replied': self.is_replied,
            'requires_reply': self.requires_reply,
            'reply_text': self.reply_text,
            'replied_by': self.replied_by,
            'replied_at': _iso(self.replied_at),
            'date_created': _iso(self.date_created),
        }
