"""
Data Access Object (DAO) layer over the flat JSON collections.

Route files call functions from this module instead of touching the
store directly. Readers return plain dicts (or lists of dicts) in the
on-disk shape; mutators validate references, apply one change inside a
store transaction and return the record exactly as written.
"""

import logging
import time

from solvefy.errors import AuthorizationError, ConflictError, NotFoundError
from solvefy.models import (Answer, Book, Bookmark, Grade, Lesson, Progress,
                            Question, Subject, User, now_iso)
from solvefy.services.catalog import book_publisher, grade_level, subject_icon
from solvefy.services.slugs import generate_slug, question_slug, slug_with_id
from solvefy.services.video import (detect_video_type, youtube_thumbnail)
from solvefy.store_init import get_store

logger = logging.getLogger(__name__)

CATALOG_COLLECTIONS = ('subjects', 'grades', 'books', 'lessons')

SECRET_USER_FIELDS = ('password', 'passwordHash')


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def key_field(collection):
    """Catalog rows are keyed by ``_id``, everything else by ``id``."""
    return '_id' if collection in CATALOG_COLLECTIONS else 'id'


def _read(collection):
    return get_store().read(collection)


def _find_index(rows, field, value):
    for i, row in enumerate(rows):
        if row.get(field) == value:
            return i
    return -1


def _get_by(collection, field, value):
    for row in _read(collection):
        if row.get(field) == value:
            return row
    return None


def _get(collection, record_id):
    return _get_by(collection, key_field(collection), record_id)


def _filter(rows, **criteria):
    """Keep rows whose fields equal every non-empty criterion."""
    for field, value in criteria.items():
        if value:
            rows = [r for r in rows if r.get(field) == value]
    return rows


def next_sequential_id(rows, prefix, field='id'):
    """``<prefix><max numeric suffix + 1>`` over ids sharing the prefix."""
    highest = 0
    for row in rows:
        value = str(row.get(field) or '')
        suffix = value[len(prefix):]
        if value.startswith(prefix) and suffix.isdigit():
            highest = max(highest, int(suffix))
    return f'{prefix}{highest + 1}'


def timestamp_id(rows, prefix, field='id'):
    """``<prefix><epoch millis>``, bumped until it is unused in ``rows``."""
    taken = {row.get(field) for row in rows}
    millis = int(time.time() * 1000)
    while f'{prefix}{millis}' in taken:
        millis += 1
    return f'{prefix}{millis}'


def _check_owner(row, user_id, noun):
    if row.get('createdBy') != user_id:
        raise AuthorizationError(f'You do not have permission to modify this {noun}')


def _require_record(collection, record_id, noun):
    row = _get(collection, record_id)
    if row is None:
        raise NotFoundError(f'{noun} not found')
    return row


def public_user(row):
    """Copy of a user row without password material."""
    if row is None:
        return None
    return {k: v for k, v in row.items() if k not in SECRET_USER_FIELDS}


def load_all(collections):
    """Load several collections at once. Returns dict[name, rows]."""
    return {name: _read(name) for name in collections}


# ========================================================================
# Subjects  (collection: subjects)
# ========================================================================

def get_subjects():
    return _read('subjects')


def get_subject(subject_id):
    """Get a subject by ID. Returns dict or None."""
    return _get('subjects', subject_id)


def get_subject_by_slug(slug):
    """Active subjects win over deactivated ones sharing the slug."""
    matches = [s for s in _read('subjects') if s.get('slug') == slug]
    active = [s for s in matches if s.get('isActive', True)]
    return (active or matches or [None])[0]


def create_subject(data, user_id=None):
    """Create a subject. Slug must be unique among active subjects."""
    name = data['name'].strip()
    slug = data.get('slug') or generate_slug(name)
    with get_store().transaction('subjects') as tx:
        rows = tx['subjects']
        if any(r.get('slug') == slug and r.get('isActive', True) for r in rows):
            raise ConflictError(f'Subject slug already exists: {slug}')
        subject = Subject(
            id=next_sequential_id(rows, 's', '_id'),
            name=name,
            slug=slug,
            icon=data.get('icon') or subject_icon(name),
            description=data.get('description') or None,
            sort_order=data.get('sortOrder') or 0,
            created_by=user_id,
        ).to_dict()
        rows.append(subject)
    logger.info('Created subject %s', subject['_id'])
    return subject


# ========================================================================
# Grades  (collection: grades)
# ========================================================================

def get_grades(subject_id=None):
    return _filter(_read('grades'), subjectId=subject_id)


def get_grade(grade_id):
    """Get a grade by ID. Returns dict or None."""
    return _get('grades', grade_id)


def get_grade_by_slug(slug, subject_id):
    """Grade slugs repeat across subjects, so the lookup is per subject."""
    for row in _read('grades'):
        if row.get('slug') == slug and row.get('subjectId') == subject_id:
            return row
    return None


def create_grade(data, user_id=None):
    """Create a grade. (subjectId, slug) must be unique."""
    subject = _require_record('subjects', data['subjectId'], 'Subject')
    name = data['name'].strip()
    slug = data.get('slug') or generate_slug(name)
    with get_store().transaction('grades') as tx:
        rows = tx['grades']
        if any(r.get('subjectId') == subject['_id'] and r.get('slug') == slug for r in rows):
            raise ConflictError(f'Grade slug already exists for this subject: {slug}')
        grade = Grade(
            id=next_sequential_id(rows, 'g', '_id'),
            subject_id=subject['_id'],
            name=name,
            slug=slug,
            level=data.get('level') or grade_level(name),
            description=data.get('description') or None,
            sort_order=data.get('sortOrder') or 0,
            created_by=user_id,
        ).to_dict()
        rows.append(grade)
    logger.info('Created grade %s under subject %s', grade['_id'], subject['_id'])
    return grade


# ========================================================================
# Books  (collection: books)
# ========================================================================

def get_books(subject_id=None, grade_id=None, publisher=None):
    """Books filtered by parent ids and a case-insensitive publisher substring."""
    books = _filter(_read('books'), subjectId=subject_id, gradeId=grade_id)
    if publisher:
        needle = publisher.lower()
        books = [b for b in books if needle in (b.get('publisher') or '').lower()]
    return books


def get_book(book_id):
    """Get a book by ID. Returns dict or None."""
    return _get('books', book_id)


def get_book_by_slug(slug):
    return _get_by('books', 'slug', slug)


def create_book(data, user_id=None):
    """Create a book. subjectId is always taken from the parent grade."""
    grade = _require_record('grades', data['gradeId'], 'Grade')
    name = data['name'].strip()
    with get_store().transaction('books') as tx:
        rows = tx['books']
        book_id = next_sequential_id(rows, 'b', '_id')
        book = Book(
            id=book_id,
            grade_id=grade['_id'],
            subject_id=grade.get('subjectId'),
            name=name,
            publisher=data.get('publisher') or book_publisher(name),
            slug=slug_with_id(name, book_id),
            description=data.get('description') or None,
            cover_image_url=data.get('coverImageUrl') or None,
            publication_year=data.get('publicationYear') or None,
            sort_order=data.get('sortOrder') or 0,
            created_by=user_id,
        ).to_dict()
        rows.append(book)
    logger.info('Created book %s under grade %s', book_id, grade['_id'])
    return book


# ========================================================================
# Lessons  (collection: lessons)
# ========================================================================

def get_lessons(book_id=None, subject_id=None, grade_id=None):
    """Lessons filtered by parent ids, always ordered by sortOrder."""
    lessons = _filter(_read('lessons'), bookId=book_id, subjectId=subject_id, gradeId=grade_id)
    return sorted(lessons, key=lambda lesson: lesson.get('sortOrder') or 0)


def get_lesson(lesson_id):
    """Get a lesson by ID. Returns dict or None."""
    return _get('lessons', lesson_id)


def get_lesson_by_slug(slug):
    return _get_by('lessons', 'slug', slug)


def create_lesson(data, user_id=None):
    """Create a lesson. gradeId/subjectId are copied from the parent book."""
    book = _require_record('books', data['bookId'], 'Book')
    name = data['name'].strip()
    with get_store().transaction('lessons') as tx:
        rows = tx['lessons']
        lesson_id = next_sequential_id(rows, 'l', '_id')
        sort_order = data.get('sortOrder')
        if sort_order is None:
            siblings = [r.get('sortOrder') or 0 for r in rows if r.get('bookId') == book['_id']]
            sort_order = max(siblings, default=0) + 1
        lesson = Lesson(
            id=lesson_id,
            book_id=book['_id'],
            grade_id=book.get('gradeId'),
            subject_id=book.get('subjectId'),
            name=name,
            slug=slug_with_id(name, lesson_id),
            content=data.get('content') or None,
            description=data.get('description') or None,
            sort_order=sort_order,
            created_by=user_id,
        ).to_dict()
        rows.append(lesson)
    logger.info('Created lesson %s in book %s', lesson_id, book['_id'])
    return lesson


# ========================================================================
# Questions  (collection: questions)
# ========================================================================

def get_questions(lesson_id=None, user_id=None):
    return _filter(_read('questions'), lessonId=lesson_id, createdBy=user_id)


def get_question(question_id):
    """Get a question by ID. Returns dict or None."""
    return _get('questions', question_id)


def get_question_by_slug(slug):
    return _get_by('questions', 'slug', slug)


def create_question(data, user_id):
    """Create a question with a ``q<n>`` id and a title-derived slug."""
    lesson = _require_record('lessons', data['lessonId'], 'Lesson')
    title = data['title'].strip()
    with get_store().transaction('questions') as tx:
        rows = tx['questions']
        question_id = next_sequential_id(rows, 'q')
        now = now_iso()
        question = Question(
            id=question_id,
            lesson_id=lesson['_id'],
            title=title,
            content=data['content'].strip(),
            slug=question_slug(title, question_id),
            created_by=user_id,
            created_at=now,
            updated_at=now,
        ).to_dict()
        rows.append(question)
    logger.info('User %s created question %s', user_id, question_id)
    return question


def update_question(question_id, data, user_id):
    """Update title/content of a question owned by ``user_id``."""
    with get_store().transaction('questions') as tx:
        rows = tx['questions']
        index = _find_index(rows, 'id', question_id)
        if index == -1:
            raise NotFoundError('Question not found')
        _check_owner(rows[index], user_id, 'question')

        question = Question.from_dict(rows[index])
        question.title = data['title'].strip()
        question.content = data['content'].strip()
        question.slug = question_slug(question.title, question.id)
        question.updated_at = now_iso()
        rows[index] = {**rows[index], **question.to_dict()}
        updated = rows[index]
    return updated


def delete_question(question_id, user_id):
    """Delete a question and all of its answers in one transaction.

    Returns the number of answers removed.
    """
    with get_store().transaction('questions', 'answers') as tx:
        questions = tx['questions']
        index = _find_index(questions, 'id', question_id)
        if index == -1:
            raise NotFoundError('Question not found')
        _check_owner(questions[index], user_id, 'question')

        del questions[index]
        before = len(tx['answers'])
        tx['answers'][:] = [a for a in tx['answers'] if a.get('questionId') != question_id]
        removed = before - len(tx['answers'])
    logger.info('User %s deleted question %s and %d answer(s)', user_id, question_id, removed)
    return removed


# ========================================================================
# Answers  (collection: answers)
# ========================================================================

def get_answers(question_id=None, user_id=None):
    return _filter(_read('answers'), questionId=question_id, createdBy=user_id)


def get_answer(answer_id):
    """Get an answer by ID. Returns dict or None."""
    return _get('answers', answer_id)


def _apply_video(answer, video_url, video_type=None):
    """Set video fields; the thumbnail is only derived for YouTube URLs."""
    video_url = (video_url or '').strip() or None
    answer.video_url = video_url
    if video_url is None:
        answer.video_type = None
        answer.video_thumbnail = None
        return
    answer.video_type = video_type or detect_video_type(video_url)
    answer.video_thumbnail = youtube_thumbnail(video_url)


def create_answer(data, user_id):
    """Create an ``a<n>`` answer for an existing question."""
    question = _require_record('questions', data['questionId'], 'Question')
    with get_store().transaction('answers') as tx:
        rows = tx['answers']
        answer_id = next_sequential_id(rows, 'a')
        now = now_iso()
        answer = Answer(
            id=answer_id,
            question_id=question['id'],
            answer=data['answer'].strip(),
            explain=(data.get('explain') or '').strip(),
            created_by=user_id,
            created_at=now,
            updated_at=now,
        )
        _apply_video(answer, data.get('videoUrl'), data.get('videoType'))
        record = answer.to_dict()
        rows.append(record)
    logger.info('User %s answered question %s with %s', user_id, question['id'], answer_id)
    return record


def update_answer(answer_id, data, user_id):
    """Update an answer owned by ``user_id``. Video fields change only when sent."""
    with get_store().transaction('answers') as tx:
        rows = tx['answers']
        index = _find_index(rows, 'id', answer_id)
        if index == -1:
            raise NotFoundError('Answer not found')
        _check_owner(rows[index], user_id, 'answer')

        answer = Answer.from_dict(rows[index])
        answer.answer = data['answer'].strip()
        answer.explain = (data.get('explain') or '').strip()
        if 'videoUrl' in data:
            _apply_video(answer, data.get('videoUrl'), data.get('videoType'))
        answer.updated_at = now_iso()
        rows[index] = {**rows[index], **answer.to_dict()}
        updated = rows[index]
    return updated


def delete_answer(answer_id, user_id):
    with get_store().transaction('answers') as tx:
        rows = tx['answers']
        index = _find_index(rows, 'id', answer_id)
        if index == -1:
            raise NotFoundError('Answer not found')
        _check_owner(rows[index], user_id, 'answer')
        del rows[index]
    logger.info('User %s deleted answer %s', user_id, answer_id)


# ========================================================================
# Users  (collection: users)
# ========================================================================

def get_users():
    return _read('users')


def get_user(user_id):
    """Get a user by ID (with password material). Returns dict or None."""
    return _get('users', user_id)


def get_user_by_username(username):
    """Get a user by username. Returns dict or None."""
    return _get_by('users', 'username', username)


def create_user(data, password_hash):
    """Create a user. Username must be unique."""
    username = data['username'].strip()
    with get_store().transaction('users') as tx:
        rows = tx['users']
        if _find_index(rows, 'username', username) != -1:
            raise ConflictError('Username already taken')
        user = User(
            id=next_sequential_id(rows, 'u'),
            username=username,
            password_hash=password_hash,
            full_name=(data.get('fullName') or username).strip(),
            role=data.get('role') or 'student',
            avatar=data.get('avatar') or None,
        ).to_dict()
        rows.append(user)
    logger.info('Registered user %s (%s)', user['id'], username)
    return user


def update_user_password_hash(user_id, password_hash):
    """Replace a user's stored hash, dropping any legacy plain password."""
    with get_store().transaction('users') as tx:
        rows = tx['users']
        index = _find_index(rows, 'id', user_id)
        if index == -1:
            raise NotFoundError('User not found')
        rows[index].pop('password', None)
        rows[index]['passwordHash'] = password_hash


def get_user_overview(user_id):
    """User (without secrets) with their progress, bookmarks and counters."""
    user = get_user(user_id)
    if user is None:
        raise NotFoundError('User not found')
    progress = get_progress(user_id=user_id)
    bookmarks = get_bookmarks(user_id=user_id)
    return {
        'user': public_user(user),
        'progress': progress,
        'bookmarks': bookmarks,
        'stats': {
            'totalCompleted': sum(1 for p in progress if p.get('status') == 'completed'),
            'totalCorrect': sum(1 for p in progress if p.get('isCorrect') is True),
            'totalBookmarks': len(bookmarks),
        },
    }


# ========================================================================
# Bookmarks  (collection: bookmarks)
# ========================================================================

def get_bookmarks(user_id=None, book_id=None):
    return _filter(_read('bookmarks'), userId=user_id, bookId=book_id)


def create_bookmark(user_id, book_id):
    """Bookmark a book. A (userId, bookId) pair may exist once."""
    _require_record('users', user_id, 'User')
    _require_record('books', book_id, 'Book')
    with get_store().transaction('bookmarks') as tx:
        rows = tx['bookmarks']
        if any(b.get('userId') == user_id and b.get('bookId') == book_id for b in rows):
            raise ConflictError('Already bookmarked')
        bookmark = Bookmark(
            id=timestamp_id(rows, 'ub'),
            user_id=user_id,
            book_id=book_id,
        ).to_dict()
        rows.append(bookmark)
    logger.info('User %s bookmarked book %s', user_id, book_id)
    return bookmark


def delete_bookmark(user_id, book_id):
    with get_store().transaction('bookmarks') as tx:
        rows = tx['bookmarks']
        for i, b in enumerate(rows):
            if b.get('userId') == user_id and b.get('bookId') == book_id:
                removed = Bookmark.from_dict(rows.pop(i))
                break
        else:
            raise NotFoundError('Bookmark not found')
    logger.info('User %s removed bookmark %s', user_id, removed.id)
    return removed.id


# ========================================================================
# Progress  (collection: progress)
# ========================================================================

def get_progress(user_id=None, lesson_id=None):
    return _filter(_read('progress'), userId=user_id, lessonId=lesson_id)


def get_progress_record(user_id, lesson_id):
    """The single progress record for a (user, lesson) pair, or None."""
    for p in _read('progress'):
        if p.get('userId') == user_id and p.get('lessonId') == lesson_id:
            return p
    return None


def mark_lesson_completed(user_id, lesson_id):
    """Upsert the (user, lesson) progress record as completed.

    Returns (record, created). A repeat call keeps the record id and
    refreshes completedAt.
    """
    _require_record('users', user_id, 'User')
    _require_record('lessons', lesson_id, 'Lesson')
    with get_store().transaction('progress') as tx:
        rows = tx['progress']
        for i, p in enumerate(rows):
            if p.get('userId') == user_id and p.get('lessonId') == lesson_id:
                progress = Progress.from_dict(p)
                progress.status = 'completed'
                progress.completed_at = now_iso()
                rows[i] = {**p, **progress.to_dict()}
                return rows[i], False

        record = Progress(
            id=timestamp_id(rows, 'up'),
            user_id=user_id,
            lesson_id=lesson_id,
            status='completed',
            completed_at=now_iso(),
        ).to_dict()
        rows.append(record)
    logger.info('User %s completed lesson %s', user_id, lesson_id)
    return record, True
