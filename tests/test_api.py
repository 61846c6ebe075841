import io

import jwt

from scoring import Annotation

from conftest import auth_headers, png_bytes, points_of


def register(client, name, email, password='secret123', role=None):
    body = {'name': name, 'email': email, 'password': password}
    if role:
        body['role'] = role
    return client.post('/api/auth/register', json=body)


def login(client, email, password='secret123'):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


def upload(client, task_id, headers, data=None, filename='proof.png'):
    payload = {}
    if data is not None:
        payload['image'] = (io.BytesIO(data), filename)
    return client.post(f'/api/submissions/{task_id}', data=payload, headers=headers, content_type='multipart/form-data')


# --- auth ---

def test_register_and_login(client):
    resp = register(client, 'Sam', 'Sam@Example.com')
    assert resp.status_code == 201
    assert resp.get_json()['message'] == 'Registered'
    user_id = resp.get_json()['userId']

    resp = login(client, 'sam@example.com')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['role'] == 'student'
    assert body['name'] == 'Sam'

    claims = jwt.decode(body['token'], 'test-secret-key', algorithms=['HS256'])
    assert claims['user_id'] == user_id
    assert claims['role'] == 'student'


def test_role_defaults_to_student(client):
    register(client, 'Mallory', 'm@example.com', role='superuser')
    assert login(client, 'm@example.com').get_json()['role'] == 'student'

    register(client, 'Ada', 'ada@example.com', role='admin')
    assert login(client, 'ada@example.com').get_json()['role'] == 'admin'


def test_duplicate_email(client):
    register(client, 'Sam', 'sam@example.com')
    resp = register(client, 'Sam Again', 'SAM@example.com')
    assert resp.status_code == 409
    assert resp.get_json()['error_code'] == 'USER_EXISTS'


def test_bad_credentials_look_the_same(client):
    register(client, 'Sam', 'sam@example.com')
    wrong_password = login(client, 'sam@example.com', 'nope-nope')
    unknown_email = login(client, 'ghost@example.com')

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json()


def test_register_validation(client):
    resp = client.post('/api/auth/register', json={'name': 'Sam', 'email': 'not-an-email', 'password': 'secret123'})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['error_code'] == 'BAD_REQUEST'
    assert body['details'][0]['loc'] == ['email']

    assert client.post('/api/auth/register', data='garbage').status_code == 400


def test_token_checks(client, student):
    assert client.get('/api/tasks').get_json()['error_code'] == 'TOKEN_MISSING'

    resp = client.get('/api/tasks', headers=bearer('not-a-jwt'))
    assert resp.status_code == 401
    assert resp.get_json()['error_code'] == 'TOKEN_INVALID'

    forged = jwt.encode({'user_id': student.id, 'role': 'admin', 'name': 'x'}, 'other-key', algorithm='HS256')
    assert client.get('/api/submissions', headers=bearer(forged)).status_code == 401


def test_rotated_secret_still_accepted(app, client, student):
    old_token = jwt.encode({'user_id': student.id, 'role': 'student', 'name': 'Sam'}, 'previous-key', algorithm='HS256')
    app.config['JWT_SECRET_KEYS'] = ['test-secret-key', 'previous-key']
    assert client.get('/api/tasks', headers=bearer(old_token)).status_code == 200


# --- tasks ---

def test_admin_creates_task_students_cannot(client, admin, student):
    body = {'title': 'Cycle to College', 'category': 'Energy Saving', 'points': 25,
            'expectedLabels': [' Bicycle ', '', 'bike'], 'deadline': '2026-12-31T00:00:00'}

    resp = client.post('/api/tasks', json=body, headers=auth_headers(admin))
    assert resp.status_code == 201
    task = resp.get_json()
    assert task['points'] == 25
    assert task['expectedLabels'] == ['Bicycle', 'bike']
    assert task['isActive'] is True
    assert task['createdBy'] == admin.id

    resp = client.post('/api/tasks', json=body, headers=auth_headers(student))
    assert resp.status_code == 403
    assert resp.get_json()['error_code'] == 'FORBIDDEN'

    listed = client.get('/api/tasks', headers=auth_headers(student)).get_json()
    assert [t['title'] for t in listed] == ['Cycle to College']


def test_task_points_must_be_positive(client, admin):
    for points in (0, -10):
        resp = client.post('/api/tasks', json={'title': 'Bad', 'points': points}, headers=auth_headers(admin))
        assert resp.status_code == 400


def test_task_text_is_sanitized(client, admin):
    resp = client.post('/api/tasks', json={'title': '<b>Clean up</b>', 'points': 5}, headers=auth_headers(admin))
    assert '<b>' not in resp.get_json()['title']


def test_expected_labels_keep_punctuation_and_match(client, admin, student, labeler):
    body = {'title': 'Pack a Lunch', 'points': 10, 'expectedLabels': ['Food & Drink', "children's toy"]}
    task = client.post('/api/tasks', json=body, headers=auth_headers(admin)).get_json()
    assert task['expectedLabels'] == ['Food & Drink', "children's toy"]

    labeler.annotations = [Annotation('food & drink', 0.9)]
    sub = upload(client, task['id'], auth_headers(student), png_bytes()).get_json()
    assert sub['status'] == 'approved'
    assert sub['aiScore'] == 90
    assert points_of(student.id) == 10


# --- submissions ---

def test_submission_flow(client, admin, student, sapling_task, labeler):
    resp = upload(client, sapling_task.id, auth_headers(student), png_bytes())
    assert resp.status_code == 201
    sub = resp.get_json()
    assert sub['status'] == 'approved'
    assert sub['aiScore'] == 86
    assert sub['labels'] == ['tree', 'plant', 'environment']

    image = client.get(sub['imageUrl'])
    assert image.status_code == 200
    assert image.data == png_bytes()

    labeler.annotations = [Annotation('car', 0.95)]
    pending = upload(client, sapling_task.id, auth_headers(student), png_bytes()).get_json()
    assert pending['status'] == 'pending'
    assert pending['aiScore'] == 0

    listed = client.get('/api/submissions', headers=auth_headers(admin)).get_json()
    assert [s['id'] for s in listed] == [sub['id'], pending['id']]
    assert listed[0]['student'] == {'id': student.id, 'name': 'Sam Student', 'email': 'sam@example.com'}
    assert listed[0]['task'] == {'id': sapling_task.id, 'title': 'Plant a Sapling', 'points': 20}

    for _ in range(2):
        resp = client.patch(f"/api/submissions/{pending['id']}", json={'status': 'approved'}, headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.get_json()['status'] == 'approved'
    assert points_of(student.id) == 40

    board = client.get('/api/leaderboard', headers=auth_headers(student)).get_json()
    assert board == [{'name': 'Sam Student', 'points': 40, 'badges': []}]


def test_submission_errors(client, admin, student, sapling_task):
    assert upload(client, 999, auth_headers(student), png_bytes()).get_json()['error_code'] == 'TASK_NOT_FOUND'

    resp = upload(client, sapling_task.id, auth_headers(student))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Image is required'

    resp = upload(client, sapling_task.id, auth_headers(student), b'not really a png')
    assert resp.status_code == 400

    resp = upload(client, sapling_task.id, auth_headers(student), png_bytes(), filename='proof.exe')
    assert resp.status_code == 400

    assert upload(client, sapling_task.id, auth_headers(admin), png_bytes()).status_code == 403


def test_review_errors(client, admin, student, sapling_task):
    sub = upload(client, sapling_task.id, auth_headers(student), png_bytes()).get_json()

    resp = client.patch(f"/api/submissions/{sub['id']}", json={'status': 'pending'}, headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.get_json()['error_code'] == 'INVALID_STATUS'

    resp = client.patch('/api/submissions/4040', json={'status': 'approved'}, headers=auth_headers(admin))
    assert resp.status_code == 404

    resp = client.patch(f"/api/submissions/{sub['id']}", json={'status': 'approved'}, headers=auth_headers(student))
    assert resp.status_code == 403


def test_large_images_are_downscaled(client, student, sapling_task, blob_store):
    sub = upload(client, sapling_task.id, auth_headers(student), png_bytes(size=(2048, 512))).get_json()

    from PIL import Image
    with Image.open(blob_store.path_for(sub['imageUrl'].rsplit('/', 1)[-1])) as img:
        assert max(img.size) == 1024


# --- gamification / misc ---

def test_leaderboard_limit_validation(client, student):
    assert client.get('/api/leaderboard?limit=0', headers=auth_headers(student)).status_code == 400
    assert client.get('/api/leaderboard?limit=5', headers=auth_headers(student)).status_code == 200


def test_profile(client, student):
    resp = client.get('/api/users/me', headers=auth_headers(student))
    assert resp.get_json() == {
        'id': student.id, 'name': 'Sam Student', 'email': 'sam@example.com',
        'role': 'student', 'points': 0, 'badges': [],
    }


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['status'] == 'OK'
    assert set(body['details']) == {'database', 'uploads'}
    assert body['details']['database']['status'] == 'OK'


def test_unknown_route(client):
    resp = client.get('/api/nothing-here')
    assert resp.status_code == 404
    assert resp.get_json()['error_code'] == 'NOT_FOUND'
