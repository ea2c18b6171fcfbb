from flask import Blueprint, current_app, g, jsonify, request
from solvefy import dao
from solvefy.decorators import STAFF_ROLES, resolve_principal, role_required
from solvefy.errors import NotFoundError
from solvefy.forms import BookForm, load_form
from solvefy.services.hierarchy import book_lessons_with_progress
from solvefy.services.pagination import paginate, parse_page_args

bp = Blueprint('books', __name__, url_prefix='/api/books')


@bp.route('', methods=['GET'])
def list_books():
    """
    One book by ``id`` or ``slug``, or a paginated list filtered by
    subjectId, gradeId and (substring, case-insensitive) publisher.
    """
    book_id = request.args.get('id')
    slug = request.args.get('slug')

    if book_id or slug:
        book = dao.get_book(book_id) if book_id else dao.get_book_by_slug(slug)
        if not book:
            raise NotFoundError('Book not found')
        return jsonify({'success': True, 'data': book})

    filters = {
        key: request.args.get(key)
        for key in ('subjectId', 'gradeId', 'publisher')
        if request.args.get(key)
    }
    books = dao.get_books(
        subject_id=filters.get('subjectId'),
        grade_id=filters.get('gradeId'),
        publisher=filters.get('publisher'),
    )
    page, limit = parse_page_args(
        request.args,
        current_app.config['BOOKS_PAGE_SIZE'],
        current_app.config['MAX_PAGE_SIZE'],
    )
    items, meta = paginate(books, page, limit)
    meta['filters'] = filters
    return jsonify({'success': True, 'data': items, 'meta': meta})


@bp.route('', methods=['POST'])
@role_required(*STAFF_ROLES)
def create_book():
    data = load_form(BookForm)
    book = dao.create_book(data, g.principal_id)
    return jsonify({'success': True, 'data': book, 'message': 'Book created'}), 201


@bp.route('/<book_id>/lessons/progress', methods=['GET'])
def lessons_progress(book_id):
    """Lessons of a book with the acting user's completion flags."""
    user_id = resolve_principal(request.args.get('userId'))
    book, lessons = book_lessons_with_progress(book_id, user_id)
    completed = sum(1 for lesson in lessons if lesson['completed'])
    return jsonify({
        'success': True,
        'data': lessons,
        'meta': {
            'book': book,
            'total': len(lessons),
            'completed': completed,
        },
    })
