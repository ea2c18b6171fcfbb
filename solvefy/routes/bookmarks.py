from flask import Blueprint, jsonify, request
from solvefy import dao
from solvefy.decorators import resolve_principal
from solvefy.errors import ValidationError
from solvefy.forms import BookmarkForm, load_form

bp = Blueprint('bookmarks', __name__, url_prefix='/api/bookmarks')


@bp.route('', methods=['GET'])
def list_bookmarks():
    """Bookmarks, optionally narrowed to a user and/or a book."""
    user_id = request.args.get('userId')
    book_id = request.args.get('bookId')
    bookmarks = dao.get_bookmarks(user_id=user_id, book_id=book_id)
    return jsonify({'success': True, 'data': bookmarks, 'meta': {'total': len(bookmarks)}})


@bp.route('', methods=['POST'])
def add_bookmark():
    data = load_form(BookmarkForm)
    user_id = resolve_principal(data.get('userId'))
    bookmark = dao.create_bookmark(user_id, data['bookId'])
    return jsonify({'success': True, 'data': bookmark, 'message': 'Bookmark added'}), 201


@bp.route('', methods=['DELETE'])
def remove_bookmark():
    book_id = request.args.get('bookId')
    if not book_id:
        raise ValidationError(fields=['bookId'])
    user_id = resolve_principal(request.args.get('userId'))
    bookmark_id = dao.delete_bookmark(user_id, book_id)
    return jsonify({'success': True, 'data': {'id': bookmark_id}, 'message': 'Bookmark removed'})
