from flask import current_app, jsonify, request
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from eventquiz import db
from eventquiz.config import config
from eventquiz.auth import auth_bp
from eventquiz.auth.models import User
from eventquiz.auth.utils import (
    hash_password,
    is_valid_email,
    normalize_email,
    validate_password,
    verify_password,
)
from eventquiz.security import SecurityLogger, rate_limit


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "user_type": user.user_type,
    }


@auth_bp.route("/", methods=["GET"])
def auth_root():
    """Simple health/info endpoint for auth API."""
    base_path = config.AUTH_API_PREFIX
    return jsonify(
        {
            "status": "ok",
            "message": "Auth API is running",
            "endpoints": [
                f"{base_path}/register",
                f"{base_path}/login",
                f"{base_path}/logout",
                f"{base_path}/me",
            ],
        }
    ), 200


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create a participant account and sign it in."""
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    full_name = (data.get("full_name") or "").strip()

    if not email or not password or not full_name:
        return jsonify({"success": False, "error": "Email, password and full name are required"}), 400

    if not is_valid_email(email):
        return jsonify({"success": False, "error": "Please provide a valid email address"}), 400

    is_valid, error_message = validate_password(password)
    if not is_valid:
        return jsonify({"success": False, "error": error_message}), 400

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        user_type="participant",
    )
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"success": False, "error": "An account with this email already exists"}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error registering user")
        return jsonify({"success": False, "error": "Registration failed, please try again"}), 500

    login_user(user)
    current_app.logger.info(f"Registered participant {user.id}")
    return jsonify({"success": True, "user": _user_payload(user)}), 201


@auth_bp.route("/login", methods=["POST"])
@rate_limit(max_requests=10, window_seconds=60)
def login():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    remember = bool(data.get("remember", False))

    if not email or not password:
        return jsonify({"success": False, "error": "Email and password are required"}), 400

    if not is_valid_email(email):
        return jsonify({"success": False, "error": "Please provide a valid email address"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        SecurityLogger.log_failed_login(email)
        return jsonify({"success": False, "error": "Invalid email or password"}), 401

    login_user(user, remember=remember)
    SecurityLogger.log_successful_login(user.id, user.email)
    return jsonify({"success": True, "user": _user_payload(user)}), 200


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout_route():
    """Logout route."""
    logout_user()
    return jsonify({"success": True}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify({"success": True, "user": _user_payload(current_user)}), 200
