from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from queuedesk.models import User, Appointment, Patient
from queuedesk.services import appointment_service
from queuedesk.utils.errors import ConflictError
from queuedesk.utils.timeutils import utcnow, local_today, parse_iso_datetime

from conftest import IST


def local_time(day, clock):
    """ISO timestamp for a business-local wall-clock time"""
    return f'{day}T{clock}:00+05:30'


@pytest.fixture
def book(client):
    def _book(user_id, start_time, name='Jane', phone='5550100', age=30):
        return client.post(f'/api/v1/appointment/book/{user_id}', json={
            'startTime': start_time,
            'name': name,
            'phoneNumber': phone,
            'age': age,
        })
    return _book


def test_available_slots_for_default_hours(client, owner, tomorrow):
    owner_id, _ = owner
    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/{tomorrow}')

    assert resp.status_code == 200
    slots = resp.get_json()['data']
    assert len(slots) == 16
    assert slots[0]['startTime'] == f'{tomorrow}T03:30:00.000Z'
    assert slots[0]['endTime'] == f'{tomorrow}T04:00:00.000Z'


def test_book_slot_then_it_disappears(client, db, owner, book, tomorrow):
    owner_id, _ = owner
    resp = book(owner_id, local_time(tomorrow, '09:00'))

    assert resp.status_code == 201
    data = resp.get_json()['data']
    assert data['appointment']['status'] == 'scheduled'
    assert data['appointment']['startTime'] == f'{tomorrow}T03:30:00.000Z'
    assert data['appointment']['endTime'] == f'{tomorrow}T04:00:00.000Z'
    assert data['patient']['selfRegistered'] is True

    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/{tomorrow}')
    slots = resp.get_json()['data']
    assert len(slots) == 15
    assert f'{tomorrow}T03:30:00.000Z' not in [s['startTime'] for s in slots]

    db.session.expire_all()
    user = db.session.get(User, owner_id)
    assert (user.total_patients, user.daily_patients) == (1, 1)


def test_double_booking_is_rejected(client, db, owner, book, tomorrow):
    owner_id, _ = owner
    assert book(owner_id, local_time(tomorrow, '09:00')).status_code == 201

    resp = book(owner_id, f'{tomorrow}T03:30:00.000Z', name='John')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'This slot is no longer available. Please choose another time.'

    assert Appointment.query.count() == 1
    assert Patient.query.count() == 1
    db.session.expire_all()
    assert db.session.get(User, owner_id).total_patients == 1


def _appointment(user_id, start, status='scheduled'):
    return Appointment(user_id=user_id, start_time=start, end_time=start + timedelta(minutes=30), status=status)


def test_unique_index_rejects_second_scheduled_row(db, owner, tomorrow):
    owner_id, _ = owner
    start = parse_iso_datetime(local_time(tomorrow, '09:00'))

    db.session.add(_appointment(owner_id, start))
    db.session.commit()

    db.session.add(_appointment(owner_id, start))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()

    assert Appointment.query.count() == 1


def test_unique_index_ignores_cancelled_rows(db, owner, tomorrow):
    owner_id, _ = owner
    start = parse_iso_datetime(local_time(tomorrow, '09:00'))

    db.session.add(_appointment(owner_id, start, status='cancelled'))
    db.session.add(_appointment(owner_id, start, status='cancelled'))
    db.session.add(_appointment(owner_id, start))
    db.session.commit()

    assert Appointment.query.filter_by(status='scheduled').count() == 1


def test_concurrent_booking_loses_cleanly(client, db, owner, book, tomorrow, monkeypatch):
    owner_id, _ = owner
    assert book(owner_id, local_time(tomorrow, '09:00')).status_code == 201

    # Second request passed its lookup before the first one committed
    monkeypatch.setattr(appointment_service, '_slot_taken', lambda user_id, start_time: False)

    fields = {'name': 'John', 'phone_number': '5550101', 'age': None}
    with pytest.raises(ConflictError) as excinfo:
        appointment_service.book_appointment(owner_id, parse_iso_datetime(local_time(tomorrow, '09:00')), fields)
    assert excinfo.value.message == appointment_service.SLOT_TAKEN_MESSAGE

    resp = book(owner_id, local_time(tomorrow, '09:00'), name='John')
    assert resp.status_code == 400

    assert Patient.query.count() == 1
    assert Appointment.query.count() == 1
    db.session.expire_all()
    assert db.session.get(User, owner_id).total_patients == 1


def test_same_instant_at_another_business_is_free(owner, signup, book, tomorrow):
    owner_id, _ = owner
    other_id, _ = signup(email='other@example.com', business_name='Other Place')

    assert book(owner_id, local_time(tomorrow, '10:00')).status_code == 201
    assert book(other_id, local_time(tomorrow, '10:00')).status_code == 201


def test_cancelled_slot_can_be_rebooked(client, owner, book, tomorrow):
    owner_id, headers = owner
    appointment_id = book(owner_id, local_time(tomorrow, '11:00')).get_json()['data']['appointment']['id']

    resp = client.put(f'/api/v1/appointment/cancel/{appointment_id}', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'cancelled'

    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/{tomorrow}')
    assert len(resp.get_json()['data']) == 16

    assert book(owner_id, local_time(tomorrow, '11:00'), name='John').status_code == 201

    resp = client.put(f'/api/v1/appointment/cancel-booking/{appointment_id}', headers=headers)
    assert resp.status_code == 404


def test_cancel_flags_patient(client, db, owner, book, tomorrow):
    owner_id, headers = owner
    data = book(owner_id, local_time(tomorrow, '12:00')).get_json()['data']

    client.put(f'/api/v1/appointment/cancel-booking/{data["appointment"]["id"]}', headers=headers)

    db.session.expire_all()
    assert db.session.get(Patient, data['patient']['id']).canceled is True


def test_move_to_waitlist_does_not_count_twice(client, db, owner, book, tomorrow):
    owner_id, headers = owner
    data = book(owner_id, local_time(tomorrow, '09:30')).get_json()['data']
    appointment_id = data['appointment']['id']

    resp = client.post(f'/api/v1/appointment/move-to-waitlist/{appointment_id}', headers=headers)
    assert resp.status_code == 200
    moved = resp.get_json()['data']
    assert moved['queueEntry']['status'] == 'waiting'
    assert moved['patient']['id'] == data['patient']['id']

    db.session.expire_all()
    assert db.session.get(Appointment, appointment_id).status == 'completed'
    assert db.session.get(User, owner_id).total_patients == 1

    resp = client.get('/api/v1/queue/waitlist', headers=headers)
    assert [e['patientId'] for e in resp.get_json()['data']] == [data['patient']['id']]

    resp = client.post(f'/api/v1/appointment/move-to-waitlist/{appointment_id}', headers=headers)
    assert resp.status_code == 404


def test_add_booking_on_behalf_of_customer(client, owner, tomorrow):
    _, headers = owner
    payload = {'startTime': local_time(tomorrow, '14:00'), 'name': 'Phone Caller', 'phoneNumber': '5550142'}

    assert client.post('/api/v1/appointment/add-booking', json=payload).status_code == 401

    resp = client.post('/api/v1/appointment/add-booking', json=payload, headers=headers)
    assert resp.status_code == 201
    assert resp.get_json()['data']['patient']['selfRegistered'] is False


def test_today_bookings_only_lists_local_today(client, owner, book, tomorrow):
    owner_id, headers = owner
    today = local_today(utcnow(), IST).isoformat()
    book(owner_id, local_time(today, '12:00'))
    book(owner_id, local_time(tomorrow, '12:00'), name='John')

    resp = client.get('/api/v1/appointment/today-bookings', headers=headers)
    assert resp.status_code == 200
    bookings = resp.get_json()['data']
    assert len(bookings) == 1
    assert bookings[0]['startTime'] == f'{today}T06:30:00.000Z'


def test_appointments_are_scoped_to_owner(client, owner, signup, admin, book, tomorrow):
    owner_id, headers = owner
    _, other_headers = signup(email='other@example.com', business_name='Other Place')
    _, admin_headers = admin
    appointment_id = book(owner_id, local_time(tomorrow, '15:00')).get_json()['data']['appointment']['id']

    assert client.get('/api/v1/appointment/user-appointments', headers=other_headers).get_json()['data'] == []
    assert client.put(f'/api/v1/appointment/cancel/{appointment_id}', headers=other_headers).status_code == 404
    assert client.post(f'/api/v1/appointment/move-to-waitlist/{appointment_id}',
                       headers=other_headers).status_code == 404

    resp = client.get('/api/v1/appointment/user-appointments', headers=headers)
    assert [a['id'] for a in resp.get_json()['data']] == [appointment_id]

    resp = client.get('/api/v1/appointment/user-appointments', headers=admin_headers)
    assert [a['id'] for a in resp.get_json()['data']] == [appointment_id]


def test_slots_for_unknown_business(client, tomorrow):
    resp = client.get(f'/api/v1/appointment/available-slots/999/{tomorrow}')
    assert resp.status_code == 404


def test_slots_with_bad_date(client, owner):
    owner_id, _ = owner
    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/next-tuesday')
    assert resp.status_code == 400


@pytest.mark.parametrize('start_time', [None, '', 'half past nine'])
def test_booking_needs_valid_start_time(owner, book, start_time):
    owner_id, _ = owner
    assert book(owner_id, start_time).status_code == 400


def test_booking_for_unknown_business(book, tomorrow):
    assert book(999, local_time(tomorrow, '09:00')).status_code == 404


def test_slots_follow_updated_business_hours(client, owner, tomorrow):
    owner_id, headers = owner
    client.put('/api/v1/user/business-hours', json={
        'startHour': 9, 'startMinute': 0, 'endHour': 10, 'endMinute': 0,
    }, headers=headers)

    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/{tomorrow}')
    assert [s['startTime'] for s in resp.get_json()['data']] == [
        f'{tomorrow}T03:30:00.000Z',
        f'{tomorrow}T04:00:00.000Z',
    ]


def test_booking_leaves_other_days_untouched(client, owner, book, tomorrow):
    owner_id, _ = owner
    book(owner_id, local_time(tomorrow, '09:00'))
    day_after = (local_today(utcnow(), IST) + timedelta(days=2)).isoformat()

    resp = client.get(f'/api/v1/appointment/available-slots/{owner_id}/{day_after}')
    assert len(resp.get_json()['data']) == 16
