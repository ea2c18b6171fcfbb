from flask import Blueprint, g, jsonify, request
from solvefy import dao
from solvefy.decorators import STAFF_ROLES, role_required
from solvefy.errors import NotFoundError
from solvefy.forms import SubjectForm, load_form

bp = Blueprint('subjects', __name__, url_prefix='/api/subjects')


@bp.route('', methods=['GET'])
def list_subjects():
    """All subjects, or one subject by ``id`` / ``slug``."""
    subject_id = request.args.get('id')
    slug = request.args.get('slug')

    if subject_id or slug:
        subject = dao.get_subject(subject_id) if subject_id else dao.get_subject_by_slug(slug)
        if not subject:
            raise NotFoundError('Subject not found')
        return jsonify({'success': True, 'data': subject})

    subjects = dao.get_subjects()
    return jsonify({'success': True, 'data': subjects, 'meta': {'total': len(subjects)}})


@bp.route('', methods=['POST'])
@role_required(*STAFF_ROLES)
def create_subject():
    data = load_form(SubjectForm)
    subject = dao.create_subject(data, g.principal_id)
    return jsonify({'success': True, 'data': subject, 'message': 'Subject created'}), 201
