from flask import Blueprint, g, jsonify, request
from solvefy import dao
from solvefy.decorators import STAFF_ROLES, role_required
from solvefy.errors import NotFoundError, ValidationError
from solvefy.forms import GradeForm, load_form

bp = Blueprint('grades', __name__, url_prefix='/api/grades')


@bp.route('', methods=['GET'])
def list_grades():
    """All grades, one grade by ``id`` (or ``slug`` within ``subjectId``),
    or the grades of ``subjectId``."""
    grade_id = request.args.get('id')
    slug = request.args.get('slug')
    subject_id = request.args.get('subjectId')

    if grade_id or slug:
        if grade_id:
            grade = dao.get_grade(grade_id)
        elif not subject_id:
            raise ValidationError(fields=['subjectId'])
        else:
            grade = dao.get_grade_by_slug(slug, subject_id)
        if not grade:
            raise NotFoundError('Grade not found')
        return jsonify({'success': True, 'data': grade})

    grades = dao.get_grades(subject_id=subject_id)
    return jsonify({
        'success': True,
        'data': grades,
        'meta': {
            'total': len(grades),
            'filters': {'subjectId': subject_id} if subject_id else {},
        },
    })


@bp.route('', methods=['POST'])
@role_required(*STAFF_ROLES)
def create_grade():
    data = load_form(GradeForm)
    grade = dao.create_grade(data, g.principal_id)
    return jsonify({'success': True, 'data': grade, 'message': 'Grade created'}), 201
