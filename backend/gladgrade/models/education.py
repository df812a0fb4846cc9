# backend/gladgrade/models/education.py
"""
Education directory: areas -> locations -> dorms, departments -> professors
-> courses (class codes), and the per-area internet, security and social
reference lists. Locations are the only education entity that can be rated.
"""
from datetime import datetime

from gladgrade import db


def _iso(value):
    return value.isoformat() if value else None


class EduArea(db.Model):
    __tablename__ = 'edu_areas'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_external = db.Column(db.Boolean, nullable=False, default=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'is_active': self.is_active,
            'is_external': self.is_external,
            'date_created': _iso(self.date_created),
        }


class EduLocation(db.Model):
    __tablename__ = 'edu_locations'

    id = db.Column(db.Integer, primary_key=True)
    edu_area_id = db.Column(db.Integer, db.ForeignKey('edu_areas.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    place_id = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_external = db.Column(db.Boolean, nullable=False, default=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    area = db.relationship('EduArea', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'edu_area_id': self.edu_area_id,
            'area_name': self.area.name if self.area else None,
            'name': self.name,
            'place_id': self.place_id,
            'is_active': self.is_active,
            'is_external': self.is_external,
            'date_created': _iso(self.date_created),
        }


class EduDorm(db.Model):
    __tablename__ = 'edu_dorms'

    id = db.Column(db.Integer, primary_key=True)
    edu_location_id = db.Column(db.Integer, db.ForeignKey('edu_locations.id'), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self, images=None):
        data = {
            'id': self.id,
            'edu_location_id': self.edu_location_id,
            'name': self.name,
            'description': self.description,
            'is_active': self.is_active,
            'date_created': _iso(self.date_created),
        }
        if images is not None:
            data['images'] = [image.to_dict() for image in images]
        return data


class EduDepartment(db.Model):
    __tablename__ = 'edu_departments'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'is_active': self.is_active,
            'date_created': _iso(self.date_created),
        }


class EduProfessor(db.Model):
    __tablename__ = 'edu_professors'

    id = db.Column(db.Integer, primary_key=True)
    edu_department_id = db.Column(db.Integer, db.ForeignKey('edu_departments.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    department = db.relationship('EduDepartment', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'edu_department_id': self.edu_department_id,
            'department_name': self.department.name if self.department else None,
            'name': self.name,
            'email': self.email,
            'date_created': _iso(self.date_created),
        }


class EduClassCode(db.Model):
    __tablename__ = 'edu_class_codes'

    id = db.Column(db.Integer, primary_key=True)
    edu_department_id = db.Column(db.Integer, db.ForeignKey('edu_departments.id'), nullable=True, index=True)
    code = db.Column(db.String(50), nullable=False)
    name = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            'id': self.id,
            'edu_department_id': self.edu_department_id,
            'code': self.code,
            'name': self.name,
            'is_active': self.is_active,
        }


class EduProfessorCourse(db.Model):
    __tablename__ = 'edu_professor_courses'

    id = db.Column(db.Integer, primary_key=True)
    professor_id = db.Column(db.Integer, db.ForeignKey('edu_professors.id'), nullable=False, index=True)
    edu_class_code_id = db.Column(db.Integer, db.ForeignKey('edu_class_codes.id'), nullable=False)

    class_code = db.relationship('EduClassCode', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'professor_id': self.professor_id,
            'edu_class_code_id': self.edu_class_code_id,
            'code': self.class_code.code if self.class_code else None,
            'name': self.class_code.name if self.class_code else None,
        }


class EduInternet(db.Model):
    __tablename__ = 'edu_internet'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'is_active': self.is_active}


class EduSecurity(db.Model):
    __tablename__ = 'edu_security'

    id = db.Column(db.Integer, primary_key=True)
    edu_area_id = db.Column(db.Integer, db.ForeignKey('edu_areas.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    area = db.relationship('EduArea', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'edu_area_id': self.edu_area_id,
            'area_name': self.area.name if self.area else None,
            'name': self.name,
        }


class EduSocial(db.Model):
    __tablename__ = 'edu_social'

    id = db.Column(db.Integer, primary_key=True)
    edu_area_id = db.Column(db.Integer, db.ForeignKey('edu_areas.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    area = db.relationship('EduArea', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'edu_area_id': self.edu_area_id,
            'area_name': self.area.name if self.area else None,
            'name': self.name,
        }


class EduCategory(db.Model):
    """Category that groups education survey questions (dorms, professors, ...)."""
    __tablename__ = 'edu_categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}
