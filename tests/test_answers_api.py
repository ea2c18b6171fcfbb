def test_create_answer_with_youtube_video(client):
    resp = client.post('/api/answers', json={
        'questionId': 'q2',
        'answer': '1 2 3 4 5',
        'videoUrl': 'https://www.youtube.com/watch?v=abc123XYZ9',
        'userId': 'u2',
    })
    assert resp.status_code == 201
    answer = resp.get_json()['data']
    assert answer['id'] == 'a4'
    assert answer['videoType'] == 'youtube'
    assert answer['videoThumbnail'] == 'https://img.youtube.com/vi/abc123XYZ9/maxresdefault.jpg'
    assert answer['explain'] == ''


def test_unrecognised_video_url_has_no_thumbnail(client):
    resp = client.post('/api/answers', json={
        'questionId': 'q2',
        'answer': 'x',
        'videoUrl': 'https://cdn.example.com/video.mp4',
        'userId': 'u2',
    })
    answer = resp.get_json()['data']
    assert answer['videoUrl'] == 'https://cdn.example.com/video.mp4'
    assert answer['videoType'] == 'uploaded'
    assert answer['videoThumbnail'] is None


def test_invalid_video_type_is_rejected(client):
    resp = client.post('/api/answers', json={
        'questionId': 'q2', 'answer': 'x', 'videoType': 'tiktok', 'userId': 'u2',
    })
    assert resp.status_code == 400


def test_answer_requires_existing_question(client):
    resp = client.post('/api/answers', json={'questionId': 'q99', 'answer': 'x', 'userId': 'u2'})
    assert resp.status_code == 404


def test_list_answers_for_question(client):
    body = client.get('/api/answers?questionId=q1').get_json()
    assert [a['id'] for a in body['data']] == ['a1', 'a2']
    assert body['meta']['filters'] == {'questionId': 'q1'}


def test_update_answer_ownership(client, store):
    resp = client.put('/api/answers/a1', json={'answer': '3', 'userId': 'u1'})
    assert resp.status_code == 403
    assert store.read('answers')[0]['answer'] == '2'


def test_update_answer_keeps_video_unless_sent(client):
    client.put('/api/answers/a1', json={
        'answer': '2', 'videoUrl': 'https://youtu.be/dQw4w9WgXcQ', 'userId': 'u2',
    })
    resp = client.put('/api/answers/a1', json={'answer': 'hai', 'userId': 'u2'})
    answer = resp.get_json()['data']
    assert answer['answer'] == 'hai'
    assert answer['videoUrl'] == 'https://youtu.be/dQw4w9WgXcQ'
    assert answer['videoThumbnail'] == 'https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg'

    resp = client.put('/api/answers/a1', json={'answer': 'hai', 'videoUrl': None, 'userId': 'u2'})
    answer = resp.get_json()['data']
    assert answer['videoUrl'] is None
    assert answer['videoType'] is None
    assert answer['videoThumbnail'] is None


def test_delete_answer(client):
    assert client.delete('/api/answers/a1?userId=u1').status_code == 403
    assert client.delete('/api/answers/a1?userId=u2').status_code == 200
    assert client.get('/api/answers?id=a1').status_code == 404
    assert client.delete('/api/answers/a1?userId=u2').status_code == 404
