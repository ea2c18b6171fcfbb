from flask import Blueprint, jsonify, request
from solvefy import dao
from solvefy.decorators import resolve_principal
from solvefy.forms import ProgressForm, load_form

bp = Blueprint('progress', __name__, url_prefix='/api/progress')


@bp.route('', methods=['GET'])
def get_progress():
    user_id = request.args.get('userId')
    lesson_id = request.args.get('lessonId')

    # A (user, lesson) pair has at most one record
    if user_id and lesson_id:
        record = dao.get_progress_record(user_id, lesson_id)
        return jsonify({
            'success': True,
            'data': record,
            'meta': {'total': 1 if record else 0},
        })

    records = dao.get_progress(user_id=user_id, lesson_id=lesson_id)
    return jsonify({'success': True, 'data': records, 'meta': {'total': len(records)}})


@bp.route('', methods=['POST'])
def complete_lesson():
    """Mark a lesson completed; re-posting refreshes completedAt."""
    data = load_form(ProgressForm)
    user_id = resolve_principal(data.get('userId'))
    record, created = dao.mark_lesson_completed(user_id, data['lessonId'])
    if created:
        return jsonify({'success': True, 'data': record, 'message': 'Progress created'}), 201
    return jsonify({'success': True, 'data': record, 'message': 'Progress updated'})
