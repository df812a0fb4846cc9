"""
Education directory reads plus admin writes for areas and locations.
"""
from gladgrade import db
from gladgrade.models import (
    EduArea, EduLocation, EduDorm, EduDepartment, EduProfessor, EduClassCode, EduProfessorCourse,
    EduInternet, EduSecurity, EduSocial, Image,
)
from gladgrade.utils.error_handler import BadRequestError
from gladgrade.utils.request_utils import apply_updates, parse_id

AREA_UPDATE_FIELDS = {
    'name': 'name',
    'isActive': 'is_active',
    'isExternal': 'is_external',
}

LOCATION_UPDATE_FIELDS = {
    'eduAreaId': 'edu_area_id',
    'name': 'name',
    'placeId': 'place_id',
    'isActive': 'is_active',
    'isExternal': 'is_external',
}


def _dorms_with_images(dorms):
    dorm_ids = [dorm.id for dorm in dorms]
    images = (Image.query
              .filter(Image.edu_dorm_id.in_(dorm_ids), Image.is_active.is_(True))
              .order_by(Image.order_by_number)
              .all()) if dorm_ids else []
    return [dorm.to_dict(images=[image for image in images if image.edu_dorm_id == dorm.id]) for dorm in dorms]


class EducationService:

    # --- areas ---

    @staticmethod
    def get_all_areas():
        return EduArea.query.filter(EduArea.is_active.is_(True)).order_by(EduArea.name).all()

    @staticmethod
    def get_area_by_id(area_id):
        return db.session.get(EduArea, area_id)

    @staticmethod
    def create_area(name, is_active=True, is_external=False):
        area = EduArea(name=name,
                       is_active=True if is_active is None else bool(is_active),
                       is_external=bool(is_external))
        db.session.add(area)
        db.session.commit()
        return EducationService.get_area_by_id(area.id)

    @staticmethod
    def update_area(area_id, data):
        area = EducationService.get_area_by_id(area_id)
        if area is None:
            return None
        apply_updates(area, data, AREA_UPDATE_FIELDS)
        db.session.commit()
        return area

    # --- locations ---

    @staticmethod
    def get_all_locations():
        return EduLocation.query.filter(EduLocation.is_active.is_(True)).order_by(EduLocation.name).all()

    @staticmethod
    def get_locations_by_area(area_id):
        return (EduLocation.query
                .filter(EduLocation.edu_area_id == area_id, EduLocation.is_active.is_(True))
                .order_by(EduLocation.name)
                .all())

    @staticmethod
    def get_location_by_id(location_id):
        return db.session.get(EduLocation, location_id)

    @staticmethod
    def create_location(edu_area_id, name, place_id=None, is_active=True, is_external=False):
        if EducationService.get_area_by_id(edu_area_id) is None:
            raise BadRequestError('Education area does not exist')
        location = EduLocation(
            edu_area_id=edu_area_id,
            name=name,
            place_id=place_id,
            is_active=True if is_active is None else bool(is_active),
            is_external=bool(is_external),
        )
        db.session.add(location)
        db.session.commit()
        return EducationService.get_location_by_id(location.id)

    @staticmethod
    def update_location(location_id, data):
        location = EducationService.get_location_by_id(location_id)
        if location is None:
            return None
        apply_updates(location, data, LOCATION_UPDATE_FIELDS,
                      converters={'eduAreaId': lambda value: parse_id(value, 'eduAreaId')})
        db.session.commit()
        return location

    # --- dorms ---

    @staticmethod
    def get_all_dorms():
        dorms = EduDorm.query.filter(EduDorm.is_active.is_(True)).order_by(EduDorm.name).all()
        return _dorms_with_images(dorms)

    @staticmethod
    def get_dorms_by_location(location_id):
        dorms = (EduDorm.query
                 .filter(EduDorm.edu_location_id == location_id, EduDorm.is_active.is_(True))
                 .order_by(EduDorm.name)
                 .all())
        return _dorms_with_images(dorms)

    @staticmethod
    def get_dorm_by_id(dorm_id):
        dorm = db.session.get(EduDorm, dorm_id)
        if dorm is None:
            return None
        return _dorms_with_images([dorm])[0]

    # --- professors and courses ---

    @staticmethod
    def get_all_professors():
        return EduProfessor.query.order_by(EduProfessor.name).all()

    @staticmethod
    def get_professors_by_department(department_id):
        return (EduProfessor.query
                .filter(EduProfessor.edu_department_id == department_id)
                .order_by(EduProfessor.name)
                .all())

    @staticmethod
    def get_professor_by_id(professor_id):
        return db.session.get(EduProfessor, professor_id)

    @staticmethod
    def get_professor_courses(professor_id):
        return (EduProfessorCourse.query
                .join(EduClassCode, EduProfessorCourse.edu_class_code_id == EduClassCode.id)
                .filter(EduProfessorCourse.professor_id == professor_id)
                .order_by(EduClassCode.code)
                .all())

    @staticmethod
    def get_all_departments():
        return EduDepartment.query.filter(EduDepartment.is_active.is_(True)).order_by(EduDepartment.name).all()

    @staticmethod
    def get_all_class_codes():
        return EduClassCode.query.filter(EduClassCode.is_active.is_(True)).order_by(EduClassCode.code).all()

    @staticmethod
    def get_class_codes_by_department(department_id):
        return (EduClassCode.query
                .filter(EduClassCode.edu_department_id == department_id, EduClassCode.is_active.is_(True))
                .order_by(EduClassCode.code)
                .all())

    # --- reference lists ---

    @staticmethod
    def get_all_internet():
        return EduInternet.query.filter(EduInternet.is_active.is_(True)).order_by(EduInternet.name).all()

    @staticmethod
    def get_all_security():
        return EduSecurity.query.order_by(EduSecurity.name).all()

    @staticmethod
    def get_all_social():
        return EduSocial.query.order_by(EduSocial.name).all()
