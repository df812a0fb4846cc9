"""
Site administration: FAQs, site page documents, survey questions, contact
messages, ads and the user activity log.

Site documents and survey questions own child rows (link rows and answer
options); creating, replacing and deleting them happens in one transaction.
"""
from datetime import datetime
import logging

from sqlalchemy import func

from gladgrade import db
from gladgrade.models import (
    User, Faq, EnvironmentType, MessageCategory, SitePageDocument, SurveyQuestion, SurveyAnswerOption,
    Message, Ad, UserActivityLog, site_page_document_category_rel, site_page_documents_used_in_rel,
)
from gladgrade.utils.db_utils import transaction
from gladgrade.utils.error_handler import BadRequestError
from gladgrade.utils.pagination import QueryFilter, paginate_query
from gladgrade.utils.request_utils import apply_updates, parse_datetime, parse_id, parse_optional_id

logger = logging.getLogger(__name__)

FAQ_UPDATE_FIELDS = {
    'faq': 'faq',
    'faqAnswer': 'faq_answer',
    'environmentTypeId': 'environment_type_id',
    'isActive': 'is_active',
}

SITE_CONTENT_UPDATE_FIELDS = {
    'subject': 'subject',
    'content': 'content',
    'isActive': 'is_active',
}

SURVEY_QUESTION_UPDATE_FIELDS = {
    'question': 'question',
    'businessTypeId': 'business_type_id',
    'eduCategoryId': 'edu_category_id',
    'isActive': 'is_active',
}

AD_UPDATE_FIELDS = {
    'businessName': 'business_name',
    'businessTelephone': 'business_telephone',
    'content': 'content',
    'expirationDate': 'expiration_date',
    'imageURL': 'image_url',
    'url': 'url',
    'isActive': 'is_active',
}


def _lookup_all(model, ids, label):
    rows = []
    for raw_id in ids or []:
        row = db.session.get(model, parse_id(raw_id, label))
        if row is None:
            raise BadRequestError(f'{label} {raw_id} does not exist')
        rows.append(row)
    return rows


class AdminService:

    @staticmethod
    def get_user_count():
        return db.session.query(func.count(User.id)).scalar()

    # --- FAQs ---

    @staticmethod
    def get_all_faqs():
        return Faq.query.order_by(Faq.date_created.desc(), Faq.id.desc()).all()

    @staticmethod
    def get_faq_by_id(faq_id):
        return db.session.get(Faq, faq_id)

    @staticmethod
    def create_faq(faq, faq_answer, environment_type_id, is_active=True):
        if db.session.get(EnvironmentType, environment_type_id) is None:
            raise BadRequestError('Environment type does not exist')
        entry = Faq(faq=faq, faq_answer=faq_answer, environment_type_id=environment_type_id,
                    is_active=True if is_active is None else bool(is_active))
        db.session.add(entry)
        db.session.commit()
        return AdminService.get_faq_by_id(entry.id)

    @staticmethod
    def update_faq(faq_id, data):
        entry = AdminService.get_faq_by_id(faq_id)
        if entry is None:
            return None
        apply_updates(entry, data, FAQ_UPDATE_FIELDS,
                      converters={'environmentTypeId': lambda value: parse_id(value, 'environmentTypeId')})
        db.session.commit()
        return entry

    @staticmethod
    def delete_faq(faq_id):
        entry = AdminService.get_faq_by_id(faq_id)
        if entry is None:
            return False
        db.session.delete(entry)
        db.session.commit()
        return True

    # --- site content ---

    @staticmethod
    def get_all_site_content():
        return SitePageDocument.query.order_by(SitePageDocument.active_since_datetime.desc()).all()

    @staticmethod
    def get_site_content_by_id(content_id):
        return db.session.get(SitePageDocument, content_id)

    @staticmethod
    def create_site_content(subject, content, is_active=True, message_category_ids=None, environment_type_ids=None):
        categories = _lookup_all(MessageCategory, message_category_ids, 'Message category')
        environments = _lookup_all(EnvironmentType, environment_type_ids, 'Environment type')
        now = datetime.utcnow()
        with transaction() as session:
            document = SitePageDocument(subject=subject, content=content,
                                        is_active=True if is_active is None else bool(is_active),
                                        date_created=now, active_since_datetime=now)
            session.add(document)
            session.flush()
            document.categories = categories
            document.environment_types = environments
        return AdminService.get_site_content_by_id(document.id)

    @staticmethod
    def update_site_content(content_id, data):
        document = AdminService.get_site_content_by_id(content_id)
        if document is None:
            return None
        categories = (_lookup_all(MessageCategory, data['messageCategoryIds'], 'Message category')
                      if 'messageCategoryIds' in data else None)
        environments = (_lookup_all(EnvironmentType, data['environmentTypeIds'], 'Environment type')
                        if 'environmentTypeIds' in data else None)
        with transaction():
            apply_updates(document, data, SITE_CONTENT_UPDATE_FIELDS)
            if categories is not None:
                document.categories = categories
            if environments is not None:
                document.environment_types = environments
        return document

    @staticmethod
    def delete_site_content(content_id):
        if AdminService.get_site_content_by_id(content_id) is None:
            return False
        with transaction() as session:
            session.execute(site_page_document_category_rel.delete().where(
                site_page_document_category_rel.c.site_page_document_id == content_id))
            session.execute(site_page_documents_used_in_rel.delete().where(
                site_page_documents_used_in_rel.c.site_page_document_id == content_id))
            SitePageDocument.query.filter(SitePageDocument.id == content_id).delete(synchronize_session=False)
        db.session.expire_all()
        return True

    # --- survey questions ---

    @staticmethod
    def get_all_survey_questions():
        return SurveyQuestion.query.order_by(SurveyQuestion.id).all()

    @staticmethod
    def get_survey_question_by_id(question_id):
        return db.session.get(SurveyQuestion, question_id)

    @staticmethod
    def create_survey_question(question, business_type_id=None, edu_category_id=None, is_active=True,
                               answer_options=None):
        with transaction() as session:
            entry = SurveyQuestion(question=question, business_type_id=business_type_id,
                                   edu_category_id=edu_category_id,
                                   is_active=True if is_active is None else bool(is_active))
            session.add(entry)
            session.flush()
            for option in answer_options or []:
                session.add(SurveyAnswerOption(survey_question_id=entry.id, answer_option=option))
        db.session.expire(entry)
        return AdminService.get_survey_question_by_id(entry.id)

    @staticmethod
    def update_survey_question(question_id, data):
        entry = AdminService.get_survey_question_by_id(question_id)
        if entry is None:
            return None
        converters = {
            'businessTypeId': lambda value: parse_optional_id(value, 'businessTypeId'),
            'eduCategoryId': lambda value: parse_optional_id(value, 'eduCategoryId'),
        }
        with transaction() as session:
            apply_updates(entry, data, SURVEY_QUESTION_UPDATE_FIELDS, converters=converters)
            if 'answerOptions' in data:
                SurveyAnswerOption.query.filter(
                    SurveyAnswerOption.survey_question_id == question_id).delete(synchronize_session=False)
                for option in data['answerOptions'] or []:
                    session.add(SurveyAnswerOption(survey_question_id=question_id, answer_option=option))
        db.session.expire(entry)
        return AdminService.get_survey_question_by_id(question_id)

    @staticmethod
    def delete_survey_question(question_id):
        if AdminService.get_survey_question_by_id(question_id) is None:
            return False
        with transaction():
            SurveyAnswerOption.query.filter(
                SurveyAnswerOption.survey_question_id == question_id).delete(synchronize_session=False)
            SurveyQuestion.query.filter(SurveyQuestion.id == question_id).delete(synchronize_session=False)
        db.session.expire_all()
        return True

    # --- messages ---

    @staticmethod
    def create_message(user_id, message, subject=None, message_category_id=None, environment_type_id=None,
                       requires_reply=False):
        if message_category_id is not None and db.session.get(MessageCategory, message_category_id) is None:
            raise BadRequestError('Message category does not exist')
        if environment_type_id is not None and db.session.get(EnvironmentType, environment_type_id) is None:
            raise BadRequestError('Environment type does not exist')
        entry = Message(user_id=user_id, message=message, subject=subject,
                        message_category_id=message_category_id, environment_type_id=environment_type_id,
                        requires_reply=bool(requires_reply))
        db.session.add(entry)
        db.session.commit()
        return db.session.get(Message, entry.id)

    @staticmethod
    def get_all_messages(page=1, limit=10, is_read=None, is_replied=None, requires_reply=None, category=None):
        query = Message.query.outerjoin(MessageCategory, Message.message_category_id == MessageCategory.id)
        filters = QueryFilter()
        filters.add_if(is_read, lambda value: Message.is_read.is_(value))
        filters.add_if(is_replied, lambda value: Message.is_replied.is_(value))
        filters.add_if(requires_reply, lambda value: Message.requires_reply.is_(value))
        filters.add_if(category, lambda name: MessageCategory.name == name)
        return paginate_query(query, filters, page, limit, order_by=[Message.date_created.desc(), Message.id.desc()])

    @staticmethod
    def get_message_by_id(message_id):
        return db.session.get(Message, message_id)

    @staticmethod
    def mark_message_as_read(message_id):
        entry = AdminService.get_message_by_id(message_id)
        if entry is None:
            return None
        entry.is_read = True
        db.session.commit()
        return entry

    @staticmethod
    def reply_to_message(message_id, reply_text, replied_by):
        entry = AdminService.get_message_by_id(message_id)
        if entry is None:
            return None
        entry.is_replied = True
        entry.is_read = True
        entry.reply_text = reply_text
        entry.replied_by = replied_by
        entry.replied_at = datetime.utcnow()
        db.session.commit()
        return entry

    @staticmethod
    def delete_message(message_id):
        entry = AdminService.get_message_by_id(message_id)
        if entry is None:
            return False
        db.session.delete(entry)
        db.session.commit()
        return True

    # --- ads ---

    @staticmethod
    def get_all_ads(page=1, limit=10, is_active=None):
        filters = QueryFilter()
        filters.add_if(is_active, lambda value: Ad.is_active.is_(value))
        return paginate_query(Ad.query, filters, page, limit, order_by=[Ad.date_created.desc(), Ad.id.desc()])

    @staticmethod
    def get_ad_by_id(ad_id):
        return db.session.get(Ad, ad_id)

    @staticmethod
    def create_ad(data):
        entry = Ad(
            business_name=data['businessName'],
            business_telephone=data.get('businessTelephone') or '',
            content=data['content'],
            expiration_date=parse_datetime(data.get('expirationDate'), 'expirationDate'),
            image_url=data.get('imageURL') or '',
            url=data.get('url') or '',
            is_active=data.get('isActive', True) is not False,
        )
        db.session.add(entry)
        db.session.commit()
        return AdminService.get_ad_by_id(entry.id)

    @staticmethod
    def update_ad(ad_id, data):
        entry = AdminService.get_ad_by_id(ad_id)
        if entry is None:
            return None
        apply_updates(entry, data, AD_UPDATE_FIELDS,
                      converters={'expirationDate': lambda value: parse_datetime(value, 'expirationDate')})
        db.session.commit()
        return entry

    @staticmethod
    def delete_ad(ad_id):
        entry = AdminService.get_ad_by_id(ad_id)
        if entry is None:
            return False
        db.session.delete(entry)
        db.session.commit()
        return True

    # --- activity logs ---

    @staticmethod
    def get_user_activity_logs(page=1, limit=10, user_id=None, event_type=None, event_category=None,
                               start_date=None, end_date=None):
        query = UserActivityLog.query.join(User, UserActivityLog.user_id == User.id)
        filters = QueryFilter()
        filters.add_if(user_id, lambda value: UserActivityLog.user_id == value)
        filters.add_if(event_type, lambda value: UserActivityLog.event_type == value)
        filters.add_if(event_category, lambda value: UserActivityLog.event_category == value)
        filters.add_if(start_date, lambda value: UserActivityLog.occurred_at >= value)
        filters.add_if(end_date, lambda value: UserActivityLog.occurred_at <= value)
        return paginate_query(query, filters, page, limit,
                              order_by=[UserActivityLog.occurred_at.desc(), UserActivityLog.id.desc()])
