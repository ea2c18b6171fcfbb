import hmac
import logging
from flask import Blueprint, jsonify, session
from solvefy import bcrypt, dao
from solvefy.decorators import auth_required, get_current_user, reset_current_user
from solvefy.errors import AuthenticationError
from solvefy.forms import LoginForm, RegistrationForm, load_form

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

INVALID_CREDENTIALS = 'Invalid username or password'


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode('utf-8')


def _check_password(user, password):
    """Verify ``password`` against the user's bcrypt hash.

    Rows imported from the old plain-text users file are compared once in
    constant time and upgraded to a hash on success.
    """
    stored_hash = user.get('passwordHash')
    if stored_hash:
        try:
            return bcrypt.check_password_hash(stored_hash, password)
        except ValueError:
            logger.error('Malformed password hash for user %s', user.get('id'))
            return False

    legacy = user.get('password')
    if legacy is None:
        return False
    if not hmac.compare_digest(str(legacy).encode('utf-8'), password.encode('utf-8')):
        return False
    dao.update_user_password_hash(user['id'], hash_password(password))
    logger.info('Upgraded plain-text password of user %s', user['id'])
    return True


@bp.route('/login', methods=['POST'])
def login():
    data = load_form(LoginForm)
    user = dao.get_user_by_username(data['username'].strip())
    if not user or not _check_password(user, data['password']):
        raise AuthenticationError(INVALID_CREDENTIALS)

    session.clear()
    session['user_id'] = user['id']
    reset_current_user()
    logger.info('User %s logged in', user['id'])
    return jsonify({'success': True, 'data': dao.public_user(user), 'message': 'Logged in'})


@bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    reset_current_user()
    return jsonify({'success': True, 'message': 'Logged out'})


@bp.route('/register', methods=['POST'])
def register():
    data = load_form(RegistrationForm)
    user = dao.create_user(data, hash_password(data['password']))
    return jsonify({'success': True, 'data': dao.public_user(user), 'message': 'Registered'}), 201


@bp.route('/me', methods=['GET'])
@auth_required
def me():
    return jsonify({'success': True, 'data': get_current_user().to_dict()})
