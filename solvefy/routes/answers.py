from flask import Blueprint, jsonify, request
from solvefy import dao
from solvefy.decorators import resolve_principal
from solvefy.errors import NotFoundError
from solvefy.forms import AnswerForm, AnswerUpdateForm, load_form

bp = Blueprint('answers', __name__, url_prefix='/api/answers')


@bp.route('', methods=['GET'])
def list_answers():
    answer_id = request.args.get('id')
    if answer_id:
        answer = dao.get_answer(answer_id)
        if not answer:
            raise NotFoundError('Answer not found')
        return jsonify({'success': True, 'data': answer})

    filters = {
        key: request.args.get(key)
        for key in ('questionId', 'userId')
        if request.args.get(key)
    }
    answers = dao.get_answers(question_id=filters.get('questionId'), user_id=filters.get('userId'))
    return jsonify({
        'success': True,
        'data': answers,
        'meta': {'total': len(answers), 'filters': filters},
    })


@bp.route('', methods=['POST'])
def create_answer():
    data = load_form(AnswerForm)
    user_id = resolve_principal(data.get('userId'))
    answer = dao.create_answer(data, user_id)
    return jsonify({'success': True, 'data': answer, 'message': 'Answer created'}), 201


@bp.route('/<answer_id>', methods=['PUT'])
def update_answer(answer_id):
    data = load_form(AnswerUpdateForm)
    user_id = resolve_principal(data.get('userId'))
    answer = dao.update_answer(answer_id, data, user_id)
    return jsonify({'success': True, 'data': answer, 'message': 'Answer updated'})


@bp.route('/<answer_id>', methods=['DELETE'])
def delete_answer(answer_id):
    user_id = resolve_principal(request.args.get('userId'))
    dao.delete_answer(answer_id, user_id)
    return jsonify({'success': True, 'message': 'Answer deleted'})
