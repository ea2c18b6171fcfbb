from flask import Blueprint, g, jsonify, request
from solvefy import dao
from solvefy.decorators import STAFF_ROLES, role_required
from solvefy.errors import NotFoundError
from solvefy.forms import LessonForm, load_form

bp = Blueprint('lessons', __name__, url_prefix='/api/lessons')


@bp.route('', methods=['GET'])
def list_lessons():
    """One lesson by ``id`` or ``slug``, or lessons filtered by parent ids
    and ordered by sortOrder."""
    lesson_id = request.args.get('id')
    slug = request.args.get('slug')

    if lesson_id or slug:
        lesson = dao.get_lesson(lesson_id) if lesson_id else dao.get_lesson_by_slug(slug)
        if not lesson:
            raise NotFoundError('Lesson not found')
        return jsonify({'success': True, 'data': lesson})

    filters = {
        key: request.args.get(key)
        for key in ('bookId', 'subjectId', 'gradeId')
        if request.args.get(key)
    }
    lessons = dao.get_lessons(
        book_id=filters.get('bookId'),
        subject_id=filters.get('subjectId'),
        grade_id=filters.get('gradeId'),
    )
    return jsonify({
        'success': True,
        'data': lessons,
        'meta': {'total': len(lessons), 'filters': filters},
    })


@bp.route('', methods=['POST'])
@role_required(*STAFF_ROLES)
def create_lesson():
    data = load_form(LessonForm)
    lesson = dao.create_lesson(data, g.principal_id)
    return jsonify({'success': True, 'data': lesson, 'message': 'Lesson created'}), 201
