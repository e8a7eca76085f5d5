from queuedesk.models import User, Patient, QueueEntry


def _stats(db, user_id):
    db.session.expire_all()
    user = db.session.get(User, user_id)
    return user.total_patients, user.daily_patients, user.canceled_patients


def test_walk_in_lifecycle(client, db, owner, add_walk_in):
    owner_id, headers = owner
    patient_id = add_walk_in(headers, name='Jane', phone='5550100', age=30)

    resp = client.get('/api/v1/queue/waitlist', headers=headers)
    waitlist = resp.get_json()['data']
    assert [e['patientId'] for e in waitlist] == [patient_id]
    assert waitlist[0]['status'] == 'waiting'
    assert waitlist[0]['patient']['name'] == 'Jane'
    assert _stats(db, owner_id) == (1, 1, 0)

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/serve', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'serving'
    assert db.session.get(Patient, patient_id).post_consultation is not None

    resp = client.get('/api/v1/queue/serving', headers=headers)
    assert [e['patientId'] for e in resp.get_json()['data']] == [patient_id]
    assert client.get('/api/v1/queue/waitlist', headers=headers).get_json()['data'] == []

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/complete', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['status'] == 'completed'
    db.session.expire_all()
    assert db.session.get(Patient, patient_id).completion_time is not None

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/complete', headers=headers)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Patient not found in serving list'


def test_waitlist_is_oldest_first(client, owner, add_walk_in):
    _, headers = owner
    first = add_walk_in(headers, name='First')
    second = add_walk_in(headers, name='Second')
    third = add_walk_in(headers, name='Third')

    resp = client.get('/api/v1/queue/waitlist', headers=headers)
    assert [e['patientId'] for e in resp.get_json()['data']] == [first, second, third]


def test_cannot_complete_a_waiting_patient(client, owner, add_walk_in):
    _, headers = owner
    patient_id = add_walk_in(headers)

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/complete', headers=headers)
    assert resp.status_code == 404


def test_cancel_counts_once(client, db, owner, add_walk_in):
    owner_id, headers = owner
    patient_id = add_walk_in(headers)

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/cancelled', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['canceled'] is True
    assert _stats(db, owner_id) == (1, 1, 1)

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/cancelled', headers=headers)
    assert resp.status_code == 404
    assert _stats(db, owner_id) == (1, 1, 1)


def test_serving_patient_cannot_be_cancelled(client, db, owner, add_walk_in):
    owner_id, headers = owner
    patient_id = add_walk_in(headers)
    client.put(f'/api/v1/queue/patient/{patient_id}/serve', headers=headers)

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/cancelled', headers=headers)
    assert resp.status_code == 404
    assert _stats(db, owner_id)[2] == 0


def test_other_business_sees_not_found(client, db, owner, signup, add_walk_in):
    owner_id, headers = owner
    patient_id = add_walk_in(headers)
    _, other_headers = signup(email='other@example.com', business_name='Other Place')

    for action in ('serve', 'cancelled'):
        resp = client.put(f'/api/v1/queue/patient/{patient_id}/{action}', headers=other_headers)
        assert resp.status_code == 404

    assert client.get(f'/api/v1/queue/patient/{patient_id}', headers=other_headers).status_code == 404
    assert client.get('/api/v1/queue/waitlist', headers=other_headers).get_json()['data'] == []
    assert QueueEntry.query.filter_by(patient_id=patient_id).one().status == 'waiting'


def test_admin_cancel_counts_against_owner(client, db, owner, admin, add_walk_in):
    owner_id, headers = owner
    admin_id, admin_headers = admin
    patient_id = add_walk_in(headers)

    resp = client.get('/api/v1/queue/waitlist', headers=admin_headers)
    assert [e['patientId'] for e in resp.get_json()['data']] == [patient_id]

    resp = client.put(f'/api/v1/queue/patient/{patient_id}/cancelled', headers=admin_headers)
    assert resp.status_code == 200
    assert _stats(db, owner_id)[2] == 1
    assert _stats(db, admin_id)[2] == 0


def test_customer_self_registration_and_removal(client, db, owner):
    owner_id, headers = owner

    resp = client.post(f'/api/v1/queue/customeradd/{owner_id}', json={
        'name': 'Walk In', 'phoneNumber': '5550199', 'age': 52,
    })
    assert resp.status_code == 201
    patient_id = resp.get_json()['patientId']
    assert db.session.get(Patient, patient_id).self_registered is True

    resp = client.get('/api/v1/user/queue-status/%d' % owner_id)
    assert resp.get_json() == {'success': True, 'waitingCount': 1, 'servingCount': 0}

    resp = client.delete(f'/api/v1/queue/patientremove/{patient_id}/{owner_id}')
    assert resp.status_code == 200
    patient = resp.get_json()['data']
    assert patient['canceled'] is True
    assert patient['selfCanceled'] is True
    assert _stats(db, owner_id) == (1, 1, 1)

    resp = client.delete(f'/api/v1/queue/patientremove/{patient_id}/{owner_id}')
    assert resp.status_code == 404


def test_self_removal_requires_matching_business(client, owner, signup, add_walk_in):
    _, headers = owner
    patient_id = add_walk_in(headers)
    other_id, _ = signup(email='other@example.com', business_name='Other Place')

    resp = client.delete(f'/api/v1/queue/patientremove/{patient_id}/{other_id}')
    assert resp.status_code == 404


def test_customeradd_unknown_business(client):
    resp = client.post('/api/v1/queue/customeradd/999', json={'name': 'Jane', 'phoneNumber': '1'})
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Queue not found'


def test_customeradd_requires_name(client, owner):
    owner_id, _ = owner
    resp = client.post(f'/api/v1/queue/customeradd/{owner_id}', json={'phoneNumber': '1'})
    assert resp.status_code == 400


def test_public_waitlist_exposes_names_only(client, owner, add_walk_in):
    owner_id, headers = owner
    add_walk_in(headers, name='Jane', phone='5550100')
    add_walk_in(headers, name='John', phone='5550101')

    resp = client.get(f'/api/v1/queue/public-waitlist/{owner_id}')
    assert resp.status_code == 200
    entries = resp.get_json()['data']
    assert [e['patient']['name'] for e in entries] == ['Jane', 'John']
    assert all('phoneNumber' not in e['patient'] for e in entries)


def test_all_patients_includes_every_status(client, owner, add_walk_in):
    _, headers = owner
    served = add_walk_in(headers, name='Served')
    cancelled = add_walk_in(headers, name='Cancelled')
    add_walk_in(headers, name='Waiting')
    client.put(f'/api/v1/queue/patient/{served}/serve', headers=headers)
    client.put(f'/api/v1/queue/patient/{cancelled}/cancelled', headers=headers)

    resp = client.get('/api/v1/queue/allpatient', headers=headers)
    statuses = sorted(e['status'] for e in resp.get_json()['data'])
    assert statuses == ['cancelled', 'serving', 'waiting']


def test_queue_requires_token(client):
    assert client.get('/api/v1/queue/waitlist').status_code == 401
    assert client.post('/api/v1/queue/patient', json={'name': 'x', 'phoneNumber': '1'}).status_code == 401
