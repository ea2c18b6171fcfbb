import pytest

from config import Config
from solvefy import create_app
from solvefy.routes.auth import hash_password
from solvefy.store_init import get_store

PASSWORD = 'password123'

SUBJECTS = [
    {'_id': 's1', 'name': 'Toán', 'slug': 'toan', 'icon': '🔢', 'sortOrder': 0, 'isActive': True},
    {'_id': 's2', 'name': 'Tiếng Việt', 'slug': 'tieng-viet', 'icon': '📖', 'sortOrder': 1, 'isActive': True},
]

GRADES = [
    {'_id': 'g1', 'subjectId': 's1', 'name': 'Lớp 1', 'slug': 'lop-1', 'level': 1, 'sortOrder': 0, 'isActive': True},
    {'_id': 'g2', 'subjectId': 's1', 'name': 'Lớp 2', 'slug': 'lop-2', 'level': 2, 'sortOrder': 1, 'isActive': True},
    {'_id': 'g3', 'subjectId': 's2', 'name': 'Lớp 1', 'slug': 'lop-1', 'level': 1, 'sortOrder': 0, 'isActive': True},
]

BOOKS = [
    {'_id': 'b1', 'gradeId': 'g1', 'subjectId': 's1', 'name': 'Toán 1 - Kết nối tri thức',
     'publisher': 'Kết nối tri thức', 'slug': 'toan-1-ket-noi-tri-thuc-b1', 'sortOrder': 0, 'isActive': True},
    {'_id': 'b2', 'gradeId': 'g1', 'subjectId': 's1', 'name': 'Toán 1 - Cánh diều',
     'publisher': 'Cánh diều', 'slug': 'toan-1-canh-dieu-b2', 'sortOrder': 1, 'isActive': True},
    {'_id': 'b3', 'gradeId': 'g2', 'subjectId': 's1', 'name': 'Toán 2 - Chân trời sáng tạo',
     'publisher': 'Chân trời sáng tạo', 'slug': 'toan-2-chan-troi-sang-tao-b3', 'sortOrder': 0, 'isActive': True},
    {'_id': 'b4', 'gradeId': 'g3', 'subjectId': 's2', 'name': 'Tiếng Việt 1 - Kết nối tri thức',
     'publisher': 'Kết nối tri thức', 'slug': 'tieng-viet-1-ket-noi-tri-thuc-b4', 'sortOrder': 0, 'isActive': True},
    {'_id': 'b5', 'gradeId': 'g404', 'subjectId': 's1', 'name': 'Sách mồ côi',
     'publisher': 'Unknown', 'slug': 'sach-mo-coi-b5', 'sortOrder': 0, 'isActive': True},
]

LESSONS = [
    {'_id': 'l1', 'bookId': 'b1', 'gradeId': 'g1', 'subjectId': 's1', 'name': 'Bài 2: Phép cộng',
     'slug': 'bai-2-phep-cong-l1', 'sortOrder': 2, 'isActive': True},
    {'_id': 'l2', 'bookId': 'b1', 'gradeId': 'g1', 'subjectId': 's1', 'name': 'Bài 1: Các số',
     'slug': 'bai-1-cac-so-l2', 'sortOrder': 1, 'isActive': True},
    {'_id': 'l3', 'bookId': 'b1', 'gradeId': 'g1', 'subjectId': 's1', 'name': 'Bài 3: Phép trừ',
     'slug': 'bai-3-phep-tru-l3', 'sortOrder': 3, 'isActive': True},
    {'_id': 'l4', 'bookId': 'b4', 'gradeId': 'g3', 'subjectId': 's2', 'name': 'Bài 1: Chữ cái',
     'slug': 'bai-1-chu-cai-l4', 'sortOrder': 1, 'isActive': True},
]

QUESTIONS = [
    {'id': 'q1', 'lessonId': 'l2', 'title': 'Tính 1 + 1', 'content': '1 + 1 bằng mấy?',
     'slug': 'tinh-1-1-q1', 'createdBy': 'u1',
     'createdAt': '2024-01-01T00:00:00.000Z', 'updatedAt': '2024-01-01T00:00:00.000Z'},
    {'id': 'q2', 'lessonId': 'l2', 'title': 'Đếm đến 5', 'content': 'Đếm từ 1 đến 5.',
     'slug': 'dem-den-5-q2', 'createdBy': 'u2',
     'createdAt': '2024-01-02T00:00:00.000Z', 'updatedAt': '2024-01-02T00:00:00.000Z'},
    {'id': 'q3', 'lessonId': 'l1', 'title': 'Tính 3 + 4', 'content': '3 + 4 bằng mấy?',
     'slug': 'tinh-3-4-q3', 'createdBy': 'u1',
     'createdAt': '2024-01-03T00:00:00.000Z', 'updatedAt': '2024-01-03T00:00:00.000Z'},
]

ANSWERS = [
    {'id': 'a1', 'questionId': 'q1', 'answer': '2', 'explain': 'Một cộng một bằng hai.',
     'videoUrl': None, 'videoType': None, 'videoThumbnail': None, 'createdBy': 'u2',
     'createdAt': '2024-01-01T01:00:00.000Z', 'updatedAt': '2024-01-01T01:00:00.000Z'},
    {'id': 'a2', 'questionId': 'q1', 'answer': 'Hai', 'explain': '',
     'videoUrl': None, 'videoType': None, 'videoThumbnail': None, 'createdBy': 'u1',
     'createdAt': '2024-01-01T02:00:00.000Z', 'updatedAt': '2024-01-01T02:00:00.000Z'},
    {'id': 'a3', 'questionId': 'q2', 'answer': '1, 2, 3, 4, 5', 'explain': '',
     'videoUrl': None, 'videoType': None, 'videoThumbnail': None, 'createdBy': 'u1',
     'createdAt': '2024-01-02T01:00:00.000Z', 'updatedAt': '2024-01-02T01:00:00.000Z'},
]

BOOKMARKS = [
    {'id': 'ub1700000000000', 'userId': 'u1', 'bookId': 'b1', 'bookmarkedAt': '2024-01-05T00:00:00.000Z'},
]

PROGRESS = [
    {'id': 'up1700000000000', 'userId': 'u1', 'lessonId': 'l1', 'status': 'completed',
     'completedAt': '2024-01-06T00:00:00.000Z'},
]


def _users():
    return [
        {'id': 'u1', 'username': 'an', 'passwordHash': hash_password(PASSWORD),
         'fullName': 'Nguyễn Văn An', 'role': 'student', 'avatar': None},
        {'id': 'u2', 'username': 'binh', 'passwordHash': hash_password(PASSWORD),
         'fullName': 'Trần Thị Bình', 'role': 'student', 'avatar': None},
        {'id': 'u3', 'username': 'admin', 'passwordHash': hash_password(PASSWORD),
         'fullName': 'Quản trị viên', 'role': 'admin', 'avatar': None},
        {'id': 'u4', 'username': 'legacy', 'password': 'secret1',
         'fullName': 'Người dùng cũ', 'role': 'student', 'avatar': None},
    ]


def make_config(data_dir, **overrides):
    attrs = {
        'TESTING': True,
        'DATA_DIR': str(data_dir),
        'SECRET_KEY': 'test-secret',
        'BCRYPT_LOG_ROUNDS': 4,
        'LOG_LEVEL': 'WARNING',
        'SITE_URL': 'https://example.test',
        'REQUIRE_SESSION': False,
    }
    attrs.update(overrides)
    return type('TestConfig', (Config,), attrs)


def seed_fixture_data():
    store = get_store()
    store.write('subjects', SUBJECTS)
    store.write('grades', GRADES)
    store.write('books', BOOKS)
    store.write('lessons', LESSONS)
    store.write('questions', QUESTIONS)
    store.write('answers', ANSWERS)
    store.write('users', _users())
    store.write('bookmarks', BOOKMARKS)
    store.write('progress', PROGRESS)


@pytest.fixture
def app(tmp_path):
    app = create_app(make_config(tmp_path / 'data'))
    with app.app_context():
        seed_fixture_data()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return get_store()


def login(client, username='an', password=PASSWORD):
    return client.post('/api/auth/login', json={'username': username, 'password': password})
