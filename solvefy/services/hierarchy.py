"""
Joins across the flat collections.

Every function here loads whole collections and joins them in memory by
foreign key. Missing ancestors resolve to None instead of failing, and
sibling order is the order of the source arrays unless a function says
otherwise.
"""

from solvefy import dao
from solvefy.errors import NotFoundError, ValidationError
from solvefy.models import parse_datetime

LEVELS = ('subject', 'grade', 'book', 'lesson', 'question')

LEVEL_COLLECTIONS = {
    'subject': 'subjects',
    'grade': 'grades',
    'book': 'books',
    'lesson': 'lessons',
    'question': 'questions',
}

# Closest parent first, so the nearest reference wins.
PARENT_REFS = {
    'question': (('lesson', 'lessonId'),),
    'lesson': (('book', 'bookId'), ('grade', 'gradeId'), ('subject', 'subjectId')),
    'book': (('grade', 'gradeId'), ('subject', 'subjectId')),
    'grade': (('subject', 'subjectId'),),
    'subject': (),
}

LEGACY_EXPORT_KEYS = ('questions', 'subjects', 'grades', 'books', 'lessons', 'users')


# A grade slug is only unique within its subject, a lesson slug within its book.
SLUG_SCOPES = {
    'grade': ('subject', 'subjectId'),
    'lesson': ('book', 'bookId'),
}


def _find(rows, field, value):
    for row in rows:
        if row.get(field) == value:
            return row
    return None


def _find_by_slug(rows, slug, scope_field=None, scope_id=None):
    """First row with ``slug`` (inside the scope), preferring active rows."""
    matches = [
        row for row in rows
        if row.get('slug') == slug and (scope_field is None or row.get(scope_field) == scope_id)
    ]
    active = [row for row in matches if row.get('isActive', True)]
    return (active or matches or [None])[0]


def _given(keys, level):
    return keys.get(f'{level}_id') or keys.get(f'{level}_slug')


def _ids_from_slugs(keys, levels, data):
    """Turn ``<level>_slug`` keys into ids, walking from the root down."""
    resolved = {}
    for level in levels:
        collection = LEVEL_COLLECTIONS[level]
        record_id = keys.get(f'{level}_id')
        slug = keys.get(f'{level}_slug')
        if record_id or not slug:
            resolved[level] = record_id
            continue

        parent, field = SLUG_SCOPES.get(level, (None, None))
        if parent and _given(keys, parent):
            scope_id = resolved.get(parent)
            record = _find_by_slug(data[collection], slug, field, scope_id) if scope_id else None
        elif level == 'grade':
            raise ValidationError('gradeSlug requires subjectId or subjectSlug')
        else:
            record = _find_by_slug(data[collection], slug)
        resolved[level] = record.get(dao.key_field(collection)) if record else None
    return resolved


def resolve_context(**keys):
    """Resolve a record and its ancestors.

    ``keys`` holds ``<level>_id`` or ``<level>_slug`` keywords (subject_id ...
    question_slug); the most specific level given is the leaf. Slugs of
    grades and lessons are looked up within the subject / book given
    alongside them. The leaf must exist; ancestors that cannot be found are
    returned as None. Returns a dict keyed by level plus a ``breadcrumbs``
    list from the root down.
    """
    leaf = next((level for level in reversed(LEVELS) if _given(keys, level)), None)
    if leaf is None:
        raise ValidationError('One of subjectId, gradeId, bookId, lessonId, questionId '
                              '(or the matching slug) is required')

    levels = LEVELS[:LEVELS.index(leaf) + 1]
    data = dao.load_all([LEVEL_COLLECTIONS[level] for level in levels])
    leaf_id = _ids_from_slugs(keys, levels, data)[leaf]
    if not leaf_id:
        raise NotFoundError(f'{leaf.capitalize()} not found')

    context = dict.fromkeys(LEVELS)
    refs = {leaf: leaf_id}

    for level in reversed(levels):
        wanted = refs.get(level)
        collection = LEVEL_COLLECTIONS[level]
        record = _find(data[collection], dao.key_field(collection), wanted) if wanted else None
        if record is None and level == leaf:
            raise NotFoundError(f'{level.capitalize()} not found')
        context[level] = record
        for parent, field in PARENT_REFS[level]:
            if not refs.get(parent) and record is not None:
                refs[parent] = record.get(field)

    context['breadcrumbs'] = [
        {
            'level': level,
            'id': context[level].get(dao.key_field(LEVEL_COLLECTIONS[level])),
            'name': context[level].get('name') or context[level].get('title'),
            'slug': context[level].get('slug'),
        }
        for level in levels if context[level] is not None
    ]
    return context


def export_all():
    """Every catalog and Q&A collection in one object (users without secrets)."""
    data = dao.load_all(LEGACY_EXPORT_KEYS)
    data['users'] = [dao.public_user(u) for u in data['users']]
    return data


def question_with_answer(question_id):
    """The question and its first answer, either of which may be None."""
    question = dao.get_question(question_id)
    answers = dao.get_answers(question_id=question_id)
    return {'question': question, 'answer': answers[0] if answers else None}


def book_lessons_with_progress(book_id, user_id):
    """Lessons of a book in sortOrder, each flagged with the user's completion."""
    book = dao.get_book(book_id)
    if book is None:
        raise NotFoundError('Book not found')
    completed = {p.get('lessonId'): p for p in dao.get_progress(user_id=user_id)
                 if p.get('status') == 'completed'}
    lessons = []
    for lesson in dao.get_lessons(book_id=book_id):
        progress = completed.get(lesson.get('_id'))
        lessons.append({
            **lesson,
            'completed': progress is not None,
            'completedAt': progress.get('completedAt') if progress else None,
        })
    return book, lessons


def _lastmod(row):
    value = parse_datetime(row.get('updatedAt') or row.get('createdAt'))
    return value.date().isoformat() if value else None


def sitemap_entries(base_url):
    """Page URLs for every subject, grade, book, lesson and question.

    Rows without a slug have no page and are skipped (with their children
    for subjects and books).
    """
    data = dao.load_all(('subjects', 'grades', 'books', 'lessons', 'questions'))
    entries = [
        {'url': base_url, 'lastmod': None, 'changefreq': 'daily', 'priority': 1.0},
        {'url': f'{base_url}/login', 'lastmod': None, 'changefreq': 'monthly', 'priority': 0.5},
    ]

    for subject in data['subjects']:
        if not subject.get('slug'):
            continue
        entries.append({'url': f"{base_url}/{subject['slug']}", 'lastmod': _lastmod(subject),
                        'changefreq': 'weekly', 'priority': 0.9})
        for grade in data['grades']:
            if grade.get('subjectId') != subject.get('_id') or not grade.get('slug'):
                continue
            entries.append({'url': f"{base_url}/{subject['slug']}/{grade['slug']}",
                            'lastmod': _lastmod(grade), 'changefreq': 'weekly', 'priority': 0.8})

    for book in data['books']:
        if not book.get('slug'):
            continue
        entries.append({'url': f"{base_url}/book/{book['slug']}", 'lastmod': _lastmod(book),
                        'changefreq': 'weekly', 'priority': 0.7})
        for lesson in data['lessons']:
            if lesson.get('bookId') != book.get('_id') or not lesson.get('slug'):
                continue
            entries.append({'url': f"{base_url}/book/{book['slug']}/{lesson['slug']}",
                            'lastmod': _lastmod(lesson), 'changefreq': 'weekly', 'priority': 0.6})

    for question in data['questions']:
        if not question.get('slug'):
            continue
        entries.append({'url': f"{base_url}/cau-hoi/{question['slug']}", 'lastmod': _lastmod(question),
                        'changefreq': 'daily', 'priority': 0.5})
    return entries
