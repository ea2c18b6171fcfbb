from conftest import login


def test_create_question(client, store):
    resp = client.post('/api/questions', json={
        'lessonId': 'l2',
        'title': 'Tính 2 + 2 = ?',
        'content': 'Hãy tính tổng.',
        'userId': 'u1',
    })
    assert resp.status_code == 201
    question = resp.get_json()['data']
    assert question['id'] == 'q4'
    assert question['slug'] == 'tinh-2-2-q4'
    assert question['createdBy'] == 'u1'
    assert question['createdAt'] == question['updatedAt']
    assert store.read('questions')[-1] == question


def test_create_question_names_missing_fields(client):
    resp = client.post('/api/questions', json={'lessonId': 'l2', 'userId': 'u1'})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['success'] is False
    assert body['error'] == 'Missing required fields: title, content'
    assert body['fields'] == ['title', 'content']


def test_create_question_requires_user(client):
    resp = client.post('/api/questions', json={'lessonId': 'l2', 'title': 'A', 'content': 'B'})
    assert resp.status_code == 400
    assert resp.get_json()['fields'] == ['userId']


def test_create_question_requires_existing_lesson(client):
    resp = client.post('/api/questions', json={'lessonId': 'l99', 'title': 'A', 'content': 'B', 'userId': 'u1'})
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Lesson not found'


def test_non_object_body_is_rejected(client):
    resp = client.post('/api/questions', json=['lessonId'])
    assert resp.status_code == 400


def test_list_questions_by_lesson_with_paging(client):
    body = client.get('/api/questions?lessonId=l2').get_json()
    assert [q['id'] for q in body['data']] == ['q1', 'q2']
    assert body['meta']['limit'] == 50

    body = client.get('/api/questions?limit=1&page=2').get_json()
    assert [q['id'] for q in body['data']] == ['q2']
    assert body['meta']['totalPages'] == 3


def test_question_by_slug(client):
    body = client.get('/api/questions?slug=tinh-1-1-q1').get_json()
    assert body['data']['id'] == 'q1'
    assert client.get('/api/questions?id=q99').status_code == 404


def test_update_by_non_owner_is_forbidden(client, store):
    before = store.read('questions')[0]
    resp = client.put('/api/questions/q1', json={'title': 'Đổi', 'content': 'Đổi', 'userId': 'u2'})
    assert resp.status_code == 403
    assert resp.get_json()['success'] is False
    assert store.read('questions')[0] == before


def test_update_missing_question_is_not_found(client):
    resp = client.put('/api/questions/q99', json={'title': 'A', 'content': 'B', 'userId': 'u2'})
    assert resp.status_code == 404


def test_update_refreshes_slug(client):
    resp = client.put('/api/questions/q1', json={'title': 'Tính 5 + 5', 'content': 'Bằng mấy?', 'userId': 'u1'})
    assert resp.status_code == 200
    question = resp.get_json()['data']
    assert question['slug'] == 'tinh-5-5-q1'
    assert question['createdAt'] == '2024-01-01T00:00:00.000Z'
    assert question['updatedAt'] != question['createdAt']


def test_delete_cascades_to_answers(client, store):
    resp = client.delete('/api/questions/q1?userId=u1')
    assert resp.status_code == 200
    assert resp.get_json()['meta']['answersDeleted'] == 2
    assert [q['id'] for q in store.read('questions')] == ['q2', 'q3']
    assert [a['id'] for a in store.read('answers')] == ['a3']


def test_delete_by_non_owner_keeps_everything(client, store):
    resp = client.delete('/api/questions/q1?userId=u2')
    assert resp.status_code == 403
    assert len(store.read('questions')) == 3
    assert len(store.read('answers')) == 3


def test_empty_body_names_every_missing_field(client):
    resp = client.post('/api/questions', json={})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['fields'] == ['lessonId', 'title', 'content', 'userId']
    assert body['error'] == 'Missing required fields: lessonId, title, content, userId'


def test_empty_body_with_session_does_not_ask_for_user(client):
    login(client)
    resp = client.post('/api/questions', json={})
    assert resp.status_code == 400
    assert resp.get_json()['fields'] == ['lessonId', 'title', 'content']
