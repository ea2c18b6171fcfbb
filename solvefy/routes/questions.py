from flask import Blueprint, current_app, jsonify, request
from solvefy import dao
from solvefy.decorators import resolve_principal
from solvefy.errors import NotFoundError
from solvefy.forms import QuestionForm, QuestionUpdateForm, load_form
from solvefy.services.pagination import paginate, parse_page_args

bp = Blueprint('questions', __name__, url_prefix='/api/questions')


@bp.route('', methods=['GET'])
def list_questions():
    question_id = request.args.get('id')
    slug = request.args.get('slug')

    if question_id or slug:
        question = dao.get_question(question_id) if question_id else dao.get_question_by_slug(slug)
        if not question:
            raise NotFoundError('Question not found')
        return jsonify({'success': True, 'data': question})

    filters = {
        key: request.args.get(key)
        for key in ('lessonId', 'userId')
        if request.args.get(key)
    }
    questions = dao.get_questions(lesson_id=filters.get('lessonId'), user_id=filters.get('userId'))
    page, limit = parse_page_args(
        request.args,
        current_app.config['QUESTIONS_PAGE_SIZE'],
        current_app.config['MAX_PAGE_SIZE'],
    )
    items, meta = paginate(questions, page, limit)
    meta['filters'] = filters
    return jsonify({'success': True, 'data': items, 'meta': meta})


@bp.route('', methods=['POST'])
def create_question():
    data = load_form(QuestionForm)
    user_id = resolve_principal(data.get('userId'))
    question = dao.create_question(data, user_id)
    return jsonify({'success': True, 'data': question, 'message': 'Question created'}), 201


@bp.route('/<question_id>', methods=['PUT'])
def update_question(question_id):
    data = load_form(QuestionUpdateForm)
    user_id = resolve_principal(data.get('userId'))
    question = dao.update_question(question_id, data, user_id)
    return jsonify({'success': True, 'data': question, 'message': 'Question updated'})


@bp.route('/<question_id>', methods=['DELETE'])
def delete_question(question_id):
    user_id = resolve_principal(request.args.get('userId'))
    removed = dao.delete_question(question_id, user_id)
    return jsonify({
        'success': True,
        'message': 'Question and related answers deleted',
        'meta': {'answersDeleted': removed},
    })
