import logging
from flask import Blueprint, jsonify, request
from solvefy.services.hierarchy import export_all, question_with_answer

logger = logging.getLogger(__name__)

bp = Blueprint('legacy', __name__, url_prefix='/api')


@bp.route('/solve', methods=['GET'])
def solve():
    """Deprecated all-in-one endpoint kept for older clients.

    Returns every collection under fixed keys, or ``{question, answer}``
    when ``questionId`` is given.
    """
    logger.warning('Deprecated /api/solve called')
    question_id = request.args.get('questionId')
    payload = question_with_answer(question_id) if question_id else export_all()
    response = jsonify(payload)
    response.headers['Deprecation'] = 'true'
    return response
