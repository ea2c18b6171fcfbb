import logging
import time
from flask import Blueprint, jsonify, request
from solvefy import dao
from solvefy.errors import NotFoundError, ValidationError
from solvefy.forms import SubmitAnswerForm, load_form
from solvefy.models import now_iso

logger = logging.getLogger(__name__)

bp = Blueprint('users', __name__, url_prefix='/api/users')


@bp.route('', methods=['GET'])
def list_users():
    """
    ``?id=`` returns the user with their progress, bookmarks and stats;
    ``?username=`` returns the bare user. Passwords are never returned.
    """
    user_id = request.args.get('id')
    username = request.args.get('username')

    if user_id:
        return jsonify({'success': True, 'data': dao.get_user_overview(user_id)})

    if username:
        user = dao.get_user_by_username(username)
        if not user:
            raise NotFoundError('User not found')
        return jsonify({'success': True, 'data': dao.public_user(user)})

    users = [dao.public_user(u) for u in dao.get_users()]
    return jsonify({'success': True, 'data': users, 'meta': {'total': len(users)}})


@bp.route('', methods=['POST'])
def user_action():
    """Deprecated answer check: compares ``userAnswer`` with the stored answer.

    Nothing is persisted; use /api/answers and /api/progress instead.
    """
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict) or body.get('action') != 'submit_answer':
        raise ValidationError('Invalid action')

    data = load_form(SubmitAnswerForm)
    logger.warning('Deprecated submit_answer used by user %s', data['userId'])

    answers = dao.get_answers(question_id=data['questionId'])
    correct = answers[0] if answers else None
    is_correct = bool(correct) and correct.get('answer') == data['userAnswer']

    response = jsonify({
        'success': True,
        'data': {
            'isCorrect': is_correct,
            'correctAnswer': correct.get('answer') if correct else None,
            'explanation': correct.get('explain') if correct else None,
            'progress': {
                'id': f'up_{int(time.time() * 1000)}',
                'userId': data['userId'],
                'questionId': data['questionId'],
                'status': 'completed',
                'userAnswer': data['userAnswer'],
                'isCorrect': is_correct,
                'attempts': 1,
                'completedAt': now_iso(),
            },
        },
    })
    response.headers['Deprecation'] = 'true'
    return response
