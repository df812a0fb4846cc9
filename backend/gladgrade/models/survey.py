# backend/gladgrade/models/survey.py
"""
Survey questions with ordered answer options, and the answers consumers
submit alongside a rating.
"""
from datetime import datetime

from gladgrade import db


class SurveyQuestion(db.Model):
    __tablename__ = 'survey_questions'

    id = db.Column(db.Integer, primary_key=True)
    question = db.Column(db.Text, nullable=False)
    business_type_id = db.Column(db.Integer, db.ForeignKey('business_types.id'), nullable=True, index=True)
    edu_category_id = db.Column(db.Integer, db.ForeignKey('edu_categories.id'), nullable=True, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    business_type = db.relationship('BusinessType', lazy='joined')
    edu_category = db.relationship('EduCategory', lazy='joined')
    answer_options = db.relationship('SurveyAnswerOption', backref='question', lazy='select',
                                     order_by='SurveyAnswerOption.id')

    def to_dict(self):
        return {
            'id': self.id,
            'question': self.question,
            'business_type_id': self.business_type_id,
            'business_type': self.business_type.business_type if self.business_type else None,
            'edu_category_id': self.edu_category_id,
            'edu_category': self.edu_category.name if self.edu_category else None,
            'is_active': self.is_active,
            'date_created': self.date_created.isoformat() if self.date_created else None,
            'answer_options': [option.to_dict() for option in self.answer_options],
        }


class SurveyAnswerOption(db.Model):
    __tablename__ = 'survey_questions_answer_options'

    id = db.Column(db.Integer, primary_key=True)
    survey_question_id = db.Column(db.Integer, db.ForeignKey('survey_questions.id'), nullable=False, index=True)
    answer_option = db.Column(db.String(500), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'survey_question_id': self.survey_question_id,
            'answer_option': self.answer_option,
        }


class SurveyAnswer(db.Model):
    __tablename__ = 'consumer_survey_question_answers'

    id = db.Column(db.Integer, primary_key=True)
    survey_question_id = db.Column(db.Integer, db.ForeignKey('survey_questions.id'), nullable=False)
    survey_questions_answer_id = db.Column(db.Integer, db.ForeignKey('survey_questions_answer_options.id'),
                                           nullable=True)
    answer = db.Column(db.Text, nullable=True)
    consumer_rating_id = db.Column(db.Integer, db.ForeignKey('consumer_ratings.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    date_created = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'survey_question_id': self.survey_question_id,
            'survey_questions_answer_id': self.survey_questions_answer_id,
            'answer': self.answer,
            'consumer_rating_id': self.consumer_rating_id,
            'user_id': self.user_id,
            'date_created': self.date_created.isoformat() if self.date_created else None,
        }
