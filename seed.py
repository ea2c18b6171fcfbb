import sys
from solvefy import create_app
from solvefy import dao
from solvefy.routes.auth import hash_password
from solvefy.store_init import get_store


CATALOG = {
    'Toán': {
        'Lớp 1': ['Toán 1 - Kết nối tri thức', 'Toán 1 - Cánh diều'],
        'Lớp 2': ['Toán 2 - Chân trời sáng tạo'],
    },
    'Tiếng Việt': {
        'Lớp 1': ['Tiếng Việt 1 - Kết nối tri thức'],
    },
    'Tiếng Anh': {
        'Lớp 3': ['Tiếng Anh 3 - Global Success'],
    },
}

LESSONS_PER_BOOK = ['Bài 1: Làm quen', 'Bài 2: Luyện tập', 'Bài 3: Ôn tập']


def seed_database(reset=False):
    app = create_app()
    with app.app_context():
        store = get_store()
        if reset:
            print("Clearing collections...")
            for name in store.collections:
                store.write(name, [])
        elif dao.get_subjects() or dao.get_users():
            print("Data directory already seeded; run with --reset to start over.")
            return

        password = 'password123'

        print("Creating users...")
        admin = dao.create_user({'username': 'admin', 'fullName': 'Quản trị viên', 'role': 'admin'},
                                hash_password(password))
        teacher = dao.create_user({'username': 'giaovien', 'fullName': 'Cô Lan', 'role': 'teacher'},
                                  hash_password(password))
        students = [
            dao.create_user({'username': f'hocsinh{i}', 'fullName': f'Học sinh {i}'}, hash_password(password))
            for i in range(1, 4)
        ]

        print("Creating catalog...")
        first_lessons = []
        for subject_name, grades in CATALOG.items():
            subject = dao.create_subject({'name': subject_name}, admin['id'])
            for grade_name, books in grades.items():
                grade = dao.create_grade({'subjectId': subject['_id'], 'name': grade_name}, admin['id'])
                for book_name in books:
                    book = dao.create_book({'gradeId': grade['_id'], 'name': book_name}, teacher['id'])
                    for order, lesson_name in enumerate(LESSONS_PER_BOOK, start=1):
                        lesson = dao.create_lesson({
                            'bookId': book['_id'],
                            'name': lesson_name,
                            'sortOrder': order,
                        }, teacher['id'])
                        if order == 1:
                            first_lessons.append(lesson)

        print("Creating questions and answers...")
        lesson = first_lessons[0]
        question = dao.create_question({
            'lessonId': lesson['_id'],
            'title': 'Tính 2 + 2 = ?',
            'content': 'Hãy tính tổng của 2 và 2.',
        }, students[0]['id'])
        dao.create_answer({
            'questionId': question['id'],
            'answer': '4',
            'explain': 'Hai cộng hai bằng bốn.',
            'videoUrl': 'https://www.youtube.com/watch?v=dQw4w9WgXcQ',
        }, teacher['id'])
        dao.create_question({
            'lessonId': lesson['_id'],
            'title': 'Số nào lớn hơn: 7 hay 9?',
            'content': 'So sánh hai số 7 và 9.',
        }, students[1]['id'])

        print("Creating bookmarks and progress...")
        dao.create_bookmark(students[0]['id'], lesson['bookId'])
        dao.mark_lesson_completed(students[0]['id'], lesson['_id'])

        print("\n" + "=" * 60)
        print("Accounts (password: password123)")
        print(f"  admin:    {admin['username']}")
        print(f"  teacher:  {teacher['username']}")
        print(f"  students: {', '.join(s['username'] for s in students)}")
        print("=" * 60)
        print("Seed complete!")


if __name__ == '__main__':
    seed_database(reset='--reset' in sys.argv[1:])
