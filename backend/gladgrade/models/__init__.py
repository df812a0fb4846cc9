# backend/gladgrade/models/__init__.py
from .user import Role, User, UserSecondaryRole, DeletedUser, UserActivityLog, ConsumerBusinessType
from .business import BusinessSector, BusinessType, Business
from .rating import Rating, Review, GladPoints
from .survey import SurveyQuestion, SurveyAnswerOption, SurveyAnswer
from .media import ImageType, Image
from .education import (
    EduArea, EduLocation, EduDorm, EduDepartment, EduProfessor, EduClassCode,
    EduProfessorCourse, EduInternet, EduSecurity, EduSocial, EduCategory,
)
from .admin import (
    EnvironmentType, MessageCategory, Faq, SitePageDocument, Ad, Message,
    site_page_document_category_rel, site_page_documents_used_in_rel,
)

__all__ = [
    'Role', 'User', 'UserSecondaryRole', 'DeletedUser', 'UserActivityLog', 'ConsumerBusinessType',
    'BusinessSector', 'BusinessType', 'Business',
    'Rating', 'Review', 'GladPoints',
    'SurveyQuestion', 'SurveyAnswerOption', 'SurveyAnswer',
    'ImageType', 'Image',
    'EduArea', 'EduLocation', 'EduDorm', 'EduDepartment', 'EduProfessor', 'EduClassCode',
    'EduProfessorCourse', 'EduInternet', 'EduSecurity', 'EduSocial', 'EduCategory',
    'EnvironmentType', 'MessageCategory', 'Faq', 'SitePageDocument', 'Ad', 'Message',
    'site_page_document_category_rel', 'site_page_documents_used_in_rel',
]
