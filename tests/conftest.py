from datetime import timedelta

import pytest

from queuedesk import create_app
from queuedesk.extensions import db as _db
from queuedesk.models import User
from queuedesk.services.user_service import issue_token
from queuedesk.utils.timeutils import utcnow, local_today

IST = timedelta(minutes=330)


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def signup(client):
    """Register a business; returns (user_id, headers)"""
    def _signup(email='owner@example.com', password='secret', business_name='Sunrise Clinic'):
        resp = client.post('/api/v1/user/signup', json={
            'email': email,
            'password': password,
            'businessName': business_name,
        })
        assert resp.status_code == 201, resp.get_json()
        user = User.query.filter_by(email=email.lower()).first()
        return user.id, auth_header(resp.get_json()['token'])
    return _signup


@pytest.fixture
def owner(signup):
    return signup()


@pytest.fixture
def admin(signup, db):
    """An admin account; its token carries the admin role claim"""
    user_id, _ = signup(email='admin@example.com', business_name='Head Office')
    user = db.session.get(User, user_id)
    user.role = 'admin'
    db.session.commit()
    return user_id, auth_header(issue_token(user))


@pytest.fixture
def add_walk_in(client):
    """Add a walk-in to the queue of the token's owner; returns the patient id"""
    def _add(headers, name='Jane', phone='5550100', age=30):
        resp = client.post('/api/v1/queue/patient', json={
            'name': name,
            'phoneNumber': phone,
            'age': age,
        }, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['patientId']
    return _add


@pytest.fixture
def tomorrow():
    """Business-local tomorrow as YYYY-MM-DD"""
    return (local_today(utcnow(), IST) + timedelta(days=1)).isoformat()
