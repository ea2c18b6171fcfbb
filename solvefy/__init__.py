import logging
from flask import Flask, jsonify
from flask_bcrypt import Bcrypt
from werkzeug.exceptions import HTTPException
from config import Config
from solvefy.errors import ApiError, StorageError

bcrypt = Bcrypt()


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    logging.getLogger('solvefy').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False
    app.json.ensure_ascii = False

    _configure_logging(app)
    bcrypt.init_app(app)

    # Initialize the JSON collection store
    from solvefy.store_init import init_store
    store = init_store(app.config)
    app.logger.info('Using data directory %s', store.data_dir)

    # Register current_user before_request
    from solvefy.decorators import load_current_user

    @app.before_request
    def before_request():
        load_current_user()

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if isinstance(error, StorageError):
            app.logger.error('Storage failure: %s', error, exc_info=error)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'error': error.description}), error.code

    # Register blueprints
    from solvefy.routes import (
        main, auth, subjects, grades, books, lessons,
        questions, answers, bookmarks, progress, users, legacy
    )
    app.register_blueprint(main.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(subjects.bp)
    app.register_blueprint(grades.bp)
    app.register_blueprint(books.bp)
    app.register_blueprint(lessons.bp)
    app.register_blueprint(questions.bp)
    app.register_blueprint(answers.bp)
    app.register_blueprint(bookmarks.bp)
    app.register_blueprint(progress.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(legacy.bp)

    return app
