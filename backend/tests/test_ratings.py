import pytest

from gladgrade import db
from gladgrade.models import GladPoints, Image, Rating, Review, SurveyAnswer, SurveyAnswerOption, SurveyQuestion
from gladgrade.services.rating_service import RatingService, summarize_ratings, validate_rating_value
from gladgrade.utils.error_handler import BadRequestError


def _create_rating(client, headers, value=5, place_id='P1', **extra):
    payload = {'ratingValue': value, 'placeId': place_id, 'placeName': 'Cafe One'}
    payload.update(extra)
    return client.post('/api/ratings/', json=payload, headers=headers)


def test_create_rating_awards_points(client, user, auth_headers):
    response = _create_rating(client, auth_headers(user), 5)
    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Rating created successfully'
    assert body['rating']['rating_value'] == 5
    assert body['gladPoints']['points'] == 10
    assert GladPoints.query.filter_by(user_id=user.id).count() == 1


def test_place_summary_after_single_rating(client, user, auth_headers):
    _create_rating(client, auth_headers(user), 5, place_id='P1')
    response = client.get('/api/ratings/by-place/P1', headers=auth_headers(user))
    assert response.status_code == 200
    summary = response.get_json()['ratings']
    assert summary['averageRating'] == 5
    assert summary['totalRatings'] == 1
    assert summary['ratingCounts'] == {'1': 0, '2': 0, '3': 0, '4': 0, '5': 1}


def test_place_summary_for_unknown_place_is_zero_filled(client, user, auth_headers):
    response = client.get('/api/ratings/by-place/nowhere', headers=auth_headers(user))
    summary = response.get_json()['ratings']
    assert summary['totalRatings'] == 0
    assert summary['averageRating'] == 0
    assert summary['ratings'] == []


def test_summary_skips_out_of_range_values_in_histogram_only(app, user):
    ratings = [Rating(user_id=user.id, place_id='P9', rating_value=value) for value in (4, 2, 9)]
    summary = summarize_ratings('P9', ratings)
    assert summary['totalRatings'] == 3
    assert summary['averageRating'] == 5
    assert sum(summary['ratingCounts'].values()) == 2


@pytest.mark.parametrize('value', [0, 6, 'five', 2.5, True, None])
def test_rating_value_is_validated(value):
    with pytest.raises(BadRequestError):
        validate_rating_value(value)


def test_out_of_range_rating_is_400(client, user, auth_headers):
    response = _create_rating(client, auth_headers(user), 7)
    assert response.status_code == 400
    assert Rating.query.count() == 0


def test_glad_points_awarded_once_per_rating(app, user):
    rating = RatingService.create_rating(user.id, 4, place_id='P2')
    first = RatingService.add_glad_points(rating.id, user.id)
    second = RatingService.add_glad_points(rating.id, user.id)
    assert first['points'] == 10
    assert second == {'message': 'Points already awarded for this rating'}
    assert GladPoints.query.filter_by(consumer_rating_id=rating.id).count() == 1


def test_glad_points_amount_is_configurable(app, user):
    app.config['GLAD_POINTS_PER_RATING'] = 25
    rating = RatingService.create_rating(user.id, 3, place_id='P3')
    assert RatingService.add_glad_points(rating.id, user.id)['points'] == 25


def test_update_rating_requires_owner(client, user, other_user, admin, auth_headers):
    rating_id = _create_rating(client, auth_headers(user), 3).get_json()['rating']['id']

    response = client.put(f'/api/ratings/{rating_id}', json={'ratingValue': 4}, headers=auth_headers(other_user))
    assert response.status_code == 403

    response = client.put(f'/api/ratings/{rating_id}', json={'ratingValue': 4}, headers=auth_headers(user))
    assert response.status_code == 200
    assert response.get_json()['rating']['rating_value'] == 4

    response = client.put(f'/api/ratings/{rating_id}', json={'ratingValue': 2}, headers=auth_headers(admin))
    assert response.status_code == 200


def test_non_numeric_rating_id_is_400(client, user, auth_headers):
    response = client.delete('/api/ratings/abc', headers=auth_headers(user))
    assert response.status_code == 400


def test_missing_rating_is_404(client, user, auth_headers):
    response = client.delete('/api/ratings/999', headers=auth_headers(user))
    assert response.status_code == 404


def test_delete_rating_cascades(client, user, auth_headers, image_type_id):
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 5).get_json()['rating']['id']
    review_id = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Great'},
                            headers=headers).get_json()['review']['id']

    question = SurveyQuestion(question='Was it clean?')
    db.session.add(question)
    db.session.commit()
    db.session.add_all([
        Image(image_type_id=image_type_id, consumer_review_id=review_id, user_id=user.id, image_url='/r.png'),
        Image(image_type_id=image_type_id, consumer_rating_id=rating_id, user_id=user.id, image_url='/a.png'),
        SurveyAnswer(survey_question_id=question.id, answer='yes', consumer_rating_id=rating_id, user_id=user.id),
    ])
    db.session.commit()

    response = client.delete(f'/api/ratings/{rating_id}', headers=headers)
    assert response.status_code == 200
    assert db.session.get(Rating, rating_id) is None
    assert Review.query.filter_by(consumer_rating_id=rating_id).count() == 0
    assert Image.query.count() == 0
    assert SurveyAnswer.query.count() == 0
    assert GladPoints.query.count() == 0


def test_review_requires_rating_owner(client, user, other_user, auth_headers):
    rating_id = _create_rating(client, auth_headers(user), 5).get_json()['rating']['id']
    response = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Mine now'},
                           headers=auth_headers(other_user))
    assert response.status_code == 403


def test_review_soft_delete_hides_from_place_listing(client, user, auth_headers):
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 4).get_json()['rating']['id']
    review = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Nice'},
                         headers=headers).get_json()['review']
    assert review['place_id'] == 'P1'

    listing = client.get('/api/ratings/reviews/by-place/P1', headers=headers).get_json()
    assert listing['pagination']['total'] == 1
    assert listing['data'][0]['display_name'] == 'Test User'
    assert listing['data'][0]['images'] == []

    response = client.delete(f"/api/ratings/reviews/{review['id']}", headers=headers)
    assert response.status_code == 200
    assert db.session.get(Review, review['id']).is_active is False

    listing = client.get('/api/ratings/reviews/by-place/P1', headers=headers).get_json()
    assert listing['pagination']['total'] == 0


def test_private_reviews_are_not_listed(client, user, auth_headers):
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 4).get_json()['rating']['id']
    client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Secret', 'isPrivate': True},
                headers=headers)
    listing = client.get('/api/ratings/reviews/by-place/P1', headers=headers).get_json()
    assert listing['data'] == []


def test_update_review_is_partial(client, user, auth_headers):
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 4).get_json()['rating']['id']
    review_id = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Ok'},
                            headers=headers).get_json()['review']['id']

    response = client.put(f'/api/ratings/reviews/{review_id}', json={'isPrivate': True}, headers=headers)
    assert response.status_code == 200
    review = response.get_json()['review']
    assert review['is_private'] is True
    assert review['review'] == 'Ok'


def test_other_user_cannot_delete_rating(client, user, other_user, auth_headers):
    rating_id = _create_rating(client, auth_headers(user), 3).get_json()['rating']['id']

    response = client.delete(f'/api/ratings/{rating_id}', headers=auth_headers(other_user))
    assert response.status_code == 403

    db.session.expire_all()
    rating = db.session.get(Rating, rating_id)
    assert rating is not None
    assert rating.rating_value == 3
    assert GladPoints.query.filter_by(consumer_rating_id=rating_id).count() == 1


def test_other_user_cannot_update_or_delete_review(client, user, other_user, auth_headers):
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 4).get_json()['rating']['id']
    review_id = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Cozy spot'},
                            headers=headers).get_json()['review']['id']

    intruder = auth_headers(other_user)
    response = client.put(f'/api/ratings/reviews/{review_id}', json={'review': 'Awful', 'isPrivate': True},
                          headers=intruder)
    assert response.status_code == 403
    assert client.delete(f'/api/ratings/reviews/{review_id}', headers=intruder).status_code == 403

    db.session.expire_all()
    review = db.session.get(Review, review_id)
    assert review.review == 'Cozy spot'
    assert review.is_private is False
    assert review.is_active is True


def test_moderation_deactivates_and_rejects_reactivation(client, user, make_user, auth_headers):
    moderator = make_user(role='Moderator')
    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 1).get_json()['rating']['id']
    review_id = client.post('/api/ratings/reviews', json={'consumerRatingId': rating_id, 'review': 'Bad words'},
                            headers=headers).get_json()['review']['id']

    response = client.put(f'/api/ratings/reviews/{review_id}/moderate', json={'isActive': True},
                          headers=headers)
    assert response.status_code == 403

    response = client.put(f'/api/ratings/reviews/{review_id}/moderate',
                          json={'isActive': False, 'moderationNotes': 'Offensive'},
                          headers=auth_headers(moderator))
    assert response.status_code == 200
    review = response.get_json()['review']
    assert review['is_active'] is False
    assert review['moderation_notes'] == 'Offensive'

    response = client.put(f'/api/ratings/reviews/{review_id}/moderate', json={'isActive': True},
                          headers=auth_headers(moderator))
    assert response.status_code == 400


def test_survey_answers_saved_together(client, user, other_user, auth_headers):
    question = SurveyQuestion(question='Service speed?')
    db.session.add(question)
    db.session.flush()
    option = SurveyAnswerOption(survey_question_id=question.id, answer_option='Fast')
    db.session.add(option)
    db.session.commit()

    headers = auth_headers(user)
    rating_id = _create_rating(client, headers, 5).get_json()['rating']['id']
    payload = {
        'consumerRatingId': rating_id,
        'answers': [
            {'surveyQuestionId': question.id, 'surveyQuestionsAnswerId': option.id},
            {'surveyQuestionId': question.id, 'answer': 'Very friendly'},
        ],
    }

    response = client.post('/api/ratings/survey-answers', json=payload, headers=auth_headers(other_user))
    assert response.status_code == 403

    response = client.post('/api/ratings/survey-answers', json=payload, headers=headers)
    assert response.status_code == 201
    assert len(response.get_json()['answers']) == 2

    payload['answers'].append({'surveyQuestionId': 12345})
    response = client.post('/api/ratings/survey-answers', json=payload, headers=headers)
    assert response.status_code == 400
    assert SurveyAnswer.query.count() == 2


def test_survey_questions_by_type(client, user, auth_headers, business_type):
    db.session.add_all([
        SurveyQuestion(question='Food quality?', business_type_id=business_type.id),
        SurveyQuestion(question='Retired question', business_type_id=business_type.id, is_active=False),
    ])
    db.session.commit()
    response = client.get(f'/api/ratings/survey-questions/by-type/{business_type.id}', headers=auth_headers(user))
    questions = response.get_json()['questions']
    assert [question['question'] for question in questions] == ['Food quality?']


def test_admin_rating_list_filters_by_place(client, user, admin, auth_headers):
    headers = auth_headers(user)
    _create_rating(client, headers, 5, place_id='P1')
    _create_rating(client, headers, 3, place_id='P2')
    _create_rating(client, headers, 4, place_id='P2')

    response = client.get('/api/ratings/all?placeId=P2&limit=1', headers=auth_headers(admin))
    body = response.get_json()
    assert body['pagination'] == {
        'total': 2, 'page': 1, 'limit': 1, 'totalPages': 2, 'hasNextPage': True, 'hasPrevPage': False,
    }
    assert body['data'][0]['place_id'] == 'P2'
