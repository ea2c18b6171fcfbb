import pytest

from conftest import PASSWORD, login, make_config, seed_fixture_data
from solvefy import create_app


def test_login_returns_user_without_password(client):
    resp = login(client)
    assert resp.status_code == 200
    user = resp.get_json()['data']
    assert user['id'] == 'u1'
    assert 'passwordHash' not in user
    assert 'password' not in user

    me = client.get('/api/auth/me').get_json()['data']
    assert me['username'] == 'an'
    assert 'passwordHash' not in me


@pytest.mark.parametrize('username,password', [
    ('an', 'wrong-password'),
    ('nobody', PASSWORD),
])
def test_login_failures_share_one_message(client, username, password):
    resp = login(client, username, password)
    assert resp.status_code == 401
    assert resp.get_json() == {'success': False, 'error': 'Invalid username or password'}


def test_login_missing_password(client):
    resp = client.post('/api/auth/login', json={'username': 'an'})
    assert resp.status_code == 400
    assert resp.get_json()['fields'] == ['password']


def test_legacy_plain_password_is_upgraded(client, store):
    assert login(client, 'legacy', 'secret1').status_code == 200
    row = next(u for u in store.read('users') if u['id'] == 'u4')
    assert 'password' not in row
    assert row['passwordHash'].startswith('$2')

    client.post('/api/auth/logout')
    assert login(client, 'legacy', 'secret1').status_code == 200
    assert login(client, 'legacy', 'wrong').status_code == 401


def test_logout_clears_session(client):
    login(client)
    assert client.post('/api/auth/logout').status_code == 200
    resp = client.get('/api/auth/me')
    assert resp.status_code == 401


def test_register(client):
    resp = client.post('/api/auth/register', json={
        'username': 'chi', 'password': 'matkhau1', 'fullName': 'Lê Chi',
    })
    assert resp.status_code == 201
    user = resp.get_json()['data']
    assert user['id'] == 'u5'
    assert user['role'] == 'student'
    assert 'passwordHash' not in user
    assert login(client, 'chi', 'matkhau1').status_code == 200


def test_register_rejects_duplicate_username(client):
    resp = client.post('/api/auth/register', json={'username': 'binh', 'password': 'matkhau1'})
    assert resp.status_code == 409
    assert resp.get_json()['error'] == 'Username already taken'


def test_register_validates_lengths(client, store):
    resp = client.post('/api/auth/register', json={'username': 'chi', 'password': '123'})
    assert resp.status_code == 400
    assert resp.get_json()['error'].startswith('password:')

    resp = client.post('/api/auth/register', json={'username': 'ab', 'password': 'matkhau1'})
    assert resp.status_code == 400
    assert resp.get_json()['error'].startswith('username:')
    assert len(store.read('users')) == 4


def test_session_user_wins_over_body(client):
    login(client)
    resp = client.post('/api/questions', json={
        'lessonId': 'l2', 'title': 'A', 'content': 'B', 'userId': 'u2',
    })
    assert resp.status_code == 403

    resp = client.post('/api/questions', json={'lessonId': 'l2', 'title': 'A', 'content': 'B'})
    assert resp.status_code == 201
    assert resp.get_json()['data']['createdBy'] == 'u1'


def test_require_session_rejects_client_user_id(tmp_path):
    app = create_app(make_config(tmp_path / 'strict', REQUIRE_SESSION=True))
    with app.app_context():
        seed_fixture_data()
    client = app.test_client()

    resp = client.post('/api/questions', json={
        'lessonId': 'l2', 'title': 'A', 'content': 'B', 'userId': 'u1',
    })
    assert resp.status_code == 401

    login(client)
    resp = client.post('/api/questions', json={'lessonId': 'l2', 'title': 'A', 'content': 'B'})
    assert resp.status_code == 201


def test_list_users_hides_passwords(client):
    users = client.get('/api/users').get_json()['data']
    assert [u['id'] for u in users] == ['u1', 'u2', 'u3', 'u4']
    for user in users:
        assert 'passwordHash' not in user
        assert 'password' not in user


def test_user_by_username(client):
    assert client.get('/api/users?username=binh').get_json()['data']['id'] == 'u2'
    assert client.get('/api/users?username=nobody').status_code == 404


def test_user_overview(client):
    data = client.get('/api/users?id=u1').get_json()['data']
    assert data['user']['username'] == 'an'
    assert 'passwordHash' not in data['user']
    assert [p['lessonId'] for p in data['progress']] == ['l1']
    assert [b['bookId'] for b in data['bookmarks']] == ['b1']
    assert data['stats'] == {'totalCompleted': 1, 'totalCorrect': 0, 'totalBookmarks': 1}

    assert client.get('/api/users?id=u99').status_code == 404


def test_submit_answer_is_checked_but_not_stored(client, store):
    resp = client.post('/api/users', json={
        'action': 'submit_answer', 'userId': 'u1', 'questionId': 'q1', 'userAnswer': '2',
    })
    assert resp.status_code == 200
    assert resp.headers['Deprecation'] == 'true'
    data = resp.get_json()['data']
    assert data['isCorrect'] is True
    assert data['correctAnswer'] == '2'
    assert data['progress']['id'].startswith('up_')
    assert len(store.read('progress')) == 1

    resp = client.post('/api/users', json={
        'action': 'submit_answer', 'userId': 'u1', 'questionId': 'q2', 'userAnswer': '5',
    })
    assert resp.get_json()['data']['isCorrect'] is False


def test_submit_answer_compares_exactly(client):
    resp = client.post('/api/users', json={
        'action': 'submit_answer', 'userId': 'u1', 'questionId': 'q1', 'userAnswer': ' 2 ',
    })
    assert resp.status_code == 200
    assert resp.get_json()['data']['isCorrect'] is False


def test_unknown_user_action(client):
    resp = client.post('/api/users', json={'action': 'delete_everything'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid action'
