from datetime import datetime
from flask_login import UserMixin

from eventquiz import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)  # Stored lower-cased
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    user_type = db.Column(db.String(20), nullable=False, default="participant")  # 'participant' or 'admin'
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email} ({self.user_type})>"

    def is_admin(self) -> bool:
        return self.user_type == "admin"
