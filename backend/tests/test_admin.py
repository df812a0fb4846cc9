import pytest

from gladgrade import db
from gladgrade.models import (
    EnvironmentType, MessageCategory, SurveyAnswerOption, UserActivityLog,
    site_page_document_category_rel, site_page_documents_used_in_rel,
)
from gladgrade.services.admin_service import AdminService


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


def _environment_id(name='Consumer App'):
    return EnvironmentType.query.filter_by(name=name).one().id


def _category_id(name):
    return MessageCategory.query.filter_by(name=name).one().id


def test_user_count(client, user, other_user, auth_headers):
    response = client.get('/api/admin/user-count', headers=auth_headers(user))
    assert response.get_json() == {'success': True, 'count': 2}


def test_content_routes_are_admin_only(client, make_user, auth_headers):
    support = make_user(role='Support')
    assert client.get('/api/admin/faqs', headers=auth_headers(support)).status_code == 403
    assert client.get('/api/admin/messages', headers=auth_headers(support)).status_code == 200


def test_faq_lifecycle(client, admin_headers):
    response = client.post('/api/admin/faqs', json={'faq': 'How do points work?', 'faqAnswer': '10 per rating',
                                                    'environmentTypeId': _environment_id()}, headers=admin_headers)
    assert response.status_code == 201
    faq = response.get_json()['faq']
    assert faq['environment_type'] == 'Consumer App'

    response = client.put(f"/api/admin/faqs/{faq['id']}", json={'faqAnswer': 'Ten per rating'}, headers=admin_headers)
    assert response.get_json()['faq']['faq'] == 'How do points work?'
    assert response.get_json()['faq']['faq_answer'] == 'Ten per rating'

    assert client.delete(f"/api/admin/faqs/{faq['id']}", headers=admin_headers).status_code == 200
    assert client.get('/api/admin/faqs', headers=admin_headers).get_json()['faqs'] == []
    assert client.delete(f"/api/admin/faqs/{faq['id']}", headers=admin_headers).status_code == 404


def test_faq_with_unknown_environment_is_400(client, admin_headers):
    response = client.post('/api/admin/faqs', json={'faq': 'Q', 'faqAnswer': 'A', 'environmentTypeId': 999},
                           headers=admin_headers)
    assert response.status_code == 400


def test_site_content_links_are_managed_together(client, admin_headers):
    payload = {
        'subject': 'Terms of Service',
        'content': 'Be nice.',
        'messageCategoryIds': [_category_id('General'), _category_id('Billing')],
        'environmentTypeIds': [_environment_id()],
    }
    response = client.post('/api/admin/site-content', json=payload, headers=admin_headers)
    assert response.status_code == 201
    content = response.get_json()['content']
    assert [category['name'] for category in content['categories']] == ['General', 'Billing']

    response = client.put(f"/api/admin/site-content/{content['id']}",
                          json={'messageCategoryIds': [_category_id('Support')]}, headers=admin_headers)
    updated = response.get_json()['content']
    assert [category['name'] for category in updated['categories']] == ['Support']
    assert [environment['name'] for environment in updated['environment_types']] == ['Consumer App']

    assert client.delete(f"/api/admin/site-content/{content['id']}", headers=admin_headers).status_code == 200
    assert db.session.query(site_page_document_category_rel).count() == 0
    assert db.session.query(site_page_documents_used_in_rel).count() == 0


def test_site_content_with_unknown_category_creates_nothing(client, admin_headers):
    response = client.post('/api/admin/site-content', json={'subject': 'S', 'content': 'C',
                                                            'messageCategoryIds': [999]}, headers=admin_headers)
    assert response.status_code == 400
    assert client.get('/api/admin/site-content', headers=admin_headers).get_json()['content'] == []


def test_survey_question_options_are_replaced(client, admin_headers):
    response = client.post('/api/admin/survey-questions',
                           json={'question': 'How was parking?', 'answerOptions': ['Easy', 'Hard']},
                           headers=admin_headers)
    assert response.status_code == 201
    question = response.get_json()['question']
    assert [option['answer_option'] for option in question['answer_options']] == ['Easy', 'Hard']

    response = client.put(f"/api/admin/survey-questions/{question['id']}",
                          json={'answerOptions': ['Free', 'Paid', 'None']}, headers=admin_headers)
    updated = response.get_json()['question']
    assert [option['answer_option'] for option in updated['answer_options']] == ['Free', 'Paid', 'None']
    assert updated['question'] == 'How was parking?'

    assert client.delete(f"/api/admin/survey-questions/{question['id']}", headers=admin_headers).status_code == 200
    assert SurveyAnswerOption.query.count() == 0


def test_message_inbox_workflow(client, user, admin, admin_headers):
    AdminService.create_message(user.id, 'Where are my points?', subject='Points',
                                message_category_id=_category_id('Support'), requires_reply=True)
    AdminService.create_message(user.id, 'Love the app', message_category_id=_category_id('Feedback'))

    listing = client.get('/api/admin/messages?category=Support', headers=admin_headers).get_json()
    assert listing['pagination']['total'] == 1
    message_id = listing['data'][0]['id']

    unread = client.get('/api/admin/messages?isRead=false', headers=admin_headers).get_json()
    assert unread['pagination']['total'] == 2

    response = client.put(f'/api/admin/messages/{message_id}/read', headers=admin_headers)
    assert response.get_json()['contactMessage']['is_read'] is True

    response = client.post(f'/api/admin/messages/{message_id}/reply', json={'replyText': 'Fixed!'},
                           headers=admin_headers)
    replied = response.get_json()['contactMessage']
    assert replied['is_replied'] is True
    assert replied['replied_by'] == admin.id
    assert replied['replied_at'] is not None

    pending = client.get('/api/admin/messages?requiresReply=true&isReplied=false', headers=admin_headers).get_json()
    assert pending['pagination']['total'] == 0

    assert client.delete(f'/api/admin/messages/{message_id}', headers=admin_headers).status_code == 200
    assert client.get('/api/admin/messages', headers=admin_headers).get_json()['pagination']['total'] == 1


def test_ads_crud(client, admin_headers):
    response = client.post('/api/admin/ads', json={'businessName': 'Cafe One', 'content': '2 for 1 coffee',
                                                   'expirationDate': '2030-01-01T00:00:00Z'}, headers=admin_headers)
    assert response.status_code == 201
    ad = response.get_json()['ad']
    assert ad['expiration_date'].startswith('2030-01-01')

    response = client.put(f"/api/admin/ads/{ad['id']}", json={'isActive': False}, headers=admin_headers)
    assert response.get_json()['ad']['is_active'] is False

    active = client.get('/api/admin/ads?isActive=true', headers=admin_headers).get_json()
    assert active['data'] == []

    bad_date = client.put(f"/api/admin/ads/{ad['id']}", json={'expirationDate': 'soon'}, headers=admin_headers)
    assert bad_date.status_code == 400


def test_activity_logs_filtering(client, user, other_user, admin_headers):
    client.post('/api/auth/guest-login', json={'firebaseUid': 'anon-logs'})
    entries = [
        UserActivityLog(user_id=user.id, event_type='logout', event_category='auth'),
        UserActivityLog(user_id=other_user.id, event_type='logout', event_category='auth'),
    ]
    db.session.add_all(entries)
    db.session.commit()

    logs = client.get('/api/admin/activity-logs?eventType=logout', headers=admin_headers).get_json()
    assert logs['pagination']['total'] == 2

    per_user = client.get(f'/api/admin/activity-logs/user/{user.id}', headers=admin_headers).get_json()
    assert [entry['user_id'] for entry in per_user['data']] == [user.id]
    assert per_user['data'][0]['first_name'] == 'Test'

    future = client.get('/api/admin/activity-logs?startDate=2999-01-01', headers=admin_headers).get_json()
    assert future['data'] == []


def test_error_stats(client, user, admin_headers, auth_headers):
    client.get('/api/ratings/42', headers=auth_headers(user))
    client.delete('/api/ratings/42', headers=auth_headers(user))

    stats = client.get('/api/admin/error-stats', headers=admin_headers).get_json()
    assert stats['total_count'] >= 1
    assert stats['by_endpoint'].get('/api/ratings/{id}', 0) >= 1

    response = client.post('/api/admin/error-stats/reset', headers=admin_headers)
    assert response.get_json()['success'] is True
    assert client.get('/api/admin/error-stats', headers=admin_headers).get_json()['total_count'] == 0
