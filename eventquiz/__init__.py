from flask import Flask, jsonify, request, current_app, send_from_directory
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress
import os

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from eventquiz.config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()

API_PATH_MARKERS = ('/api/',)


def create_app(test_config: dict | None = None) -> Flask:
    """
    Application factory for the Flask app.
    Loads configuration, wires extensions and registers blueprints.
    Values in ``test_config`` override the environment.
    """
    # Re-initialize config to ensure latest .env values are loaded
    from eventquiz.config import Config
    global config
    config = Config()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    # Load configuration from config module
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["SQLALCHEMY_DATABASE_URI"] = config.SQLALCHEMY_DATABASE_URI
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    app.config["SESSION_COOKIE_SECURE"] = config.SESSION_COOKIE_SECURE
    app.config["SESSION_COOKIE_HTTPONLY"] = config.SESSION_COOKIE_HTTPONLY
    app.config["SESSION_COOKIE_SAMESITE"] = config.SESSION_COOKIE_SAMESITE

    # Quiz engine settings
    app.config["QUIZ_TRANSITION_DELAY_MS"] = config.QUIZ_TRANSITION_DELAY_MS
    app.config["SUBMIT_RATE_LIMIT"] = config.SUBMIT_RATE_LIMIT
    app.config["SUBMIT_RATE_WINDOW_SECONDS"] = config.SUBMIT_RATE_WINDOW_SECONDS
    app.config["RATELIMIT_ENABLED"] = True
    app.config["MIN_PASSWORD_LENGTH"] = config.MIN_PASSWORD_LENGTH
    app.config["UPLOAD_DIR"] = config.UPLOAD_DIR
    app.config["MAX_IMAGE_SIZE"] = config.MAX_IMAGE_SIZE
    app.config["ALLOWED_IMAGE_EXTENSIONS"] = config.ALLOWED_IMAGE_EXTENSIONS

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = ['application/json']
    app.config["COMPRESS_LEVEL"] = 6  # Balance between compression and CPU
    app.config["COMPRESS_MIN_SIZE"] = 500  # Only compress responses > 500 bytes

    if test_config:
        app.config.update(test_config)

    db_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if db_uri.startswith("mysql"):
        if "?" not in db_uri:
            app.config["SQLALCHEMY_DATABASE_URI"] = db_uri + "?charset=utf8mb4"
        # Database connection pooling for performance
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": 5,
                "read_timeout": 10,
                "write_timeout": 10,
                "charset": "utf8mb4",
                "autocommit": False,
            }
        })

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)  # Enable response compression

    # Initialize security features
    from eventquiz.security import init_security
    init_security(app)

    @login_manager.user_loader
    def load_user(user_id):
        from eventquiz.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({
            'success': False,
            'error': 'Please sign in to continue',
            'reason': 'auth_required',
        }), 401

    @app.route("/")
    def index():
        return jsonify({
            "status": "ok",
            "message": "Event quiz API is running",
            "prefixes": {
                "auth": config.AUTH_API_PREFIX,
                "quiz": config.QUIZ_URL_PREFIX,
                "admin": config.ADMIN_URL_PREFIX,
            },
        }), 200

    @app.route("/uploads/quiz-images/<path:filename>")
    def serve_quiz_image(filename):
        """Serve a stored question image. Quiz images are public like the quizzes that show them."""
        from eventquiz.common.file_utils import QUIZ_IMAGE_DIR
        image_dir = os.path.abspath(os.path.join(current_app.config["UPLOAD_DIR"], QUIZ_IMAGE_DIR))
        # send_from_directory rejects paths escaping image_dir with a 404
        response = send_from_directory(image_dir, filename, conditional=True)
        response.cache_control.max_age = 86400  # 24 hours
        response.cache_control.public = True
        return response

    # Register blueprints
    from eventquiz.auth import auth_bp
    app.register_blueprint(auth_bp)

    from eventquiz.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    from eventquiz.admin import admin_bp
    app.register_blueprint(admin_bp)

    # Custom error handlers for API routes to return JSON instead of HTML
    @app.errorhandler(404)
    def handle_404(e):
        """Handle 404 errors - return JSON for API routes."""
        path = request.path
        current_app.logger.warning(f"404 error: {request.method} {path}")
        if any(marker in path for marker in API_PATH_MARKERS):
            return jsonify({
                'success': False,
                'error': f'Route not found: {request.method} {path}',
                'reason': 'not_found',
            }), 404
        return f"Page not found: {path}", 404

    @app.errorhandler(405)
    def handle_405(e):
        """Handle 405 Method Not Allowed - return JSON for API routes."""
        path = request.path
        current_app.logger.warning(f"405 error: {request.method} {path}")
        if any(marker in path for marker in API_PATH_MARKERS):
            return jsonify({
                'success': False,
                'error': f'Method not allowed: {request.method} {path}',
                'reason': 'invalid_input',
            }), 405
        return e

    # Create tables if they do not exist
    with app.app_context():
        from eventquiz.auth import models as _auth_models  # noqa: F401
        from eventquiz.events import models as _event_models  # noqa: F401
        from eventquiz.quiz import models as _quiz_models  # noqa: F401
        db.create_all()

    return app
