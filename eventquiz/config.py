"""
Configuration module for the application.
All configuration values are read from environment variables.
"""
import os
import secrets
import warnings


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Flask Configuration
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "")
        self.FLASK_ENV: str = os.getenv("FLASK_ENV", "")
        self.FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "").lower() == "true"

        # Generate a development SECRET_KEY if not set and in development mode
        if not self.SECRET_KEY and self.FLASK_ENV != "production":
            self.SECRET_KEY = secrets.token_urlsafe(32)
            warnings.warn(
                "SECRET_KEY not set. Generated a temporary key for development. "
                "Set SECRET_KEY in your .env file for production!",
                UserWarning
            )

        # Database Configuration
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "")
        self.DB_USER: str = os.getenv("DB_USER", "")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_HOST: str = os.getenv("DB_HOST", "")
        self.DB_PORT: str = os.getenv("DB_PORT", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "")

        # Blueprint URL Prefixes
        self.AUTH_API_PREFIX: str = os.getenv("AUTH_API_PREFIX", "/auth/api")
        self.QUIZ_URL_PREFIX: str = os.getenv("QUIZ_URL_PREFIX", "/quiz")
        self.ADMIN_URL_PREFIX: str = os.getenv("ADMIN_URL_PREFIX", "/admin")

        # Password Validation
        min_pass_len = os.getenv("MIN_PASSWORD_LENGTH", "")
        self.MIN_PASSWORD_LENGTH: int = int(min_pass_len) if min_pass_len else 8

        # Quiz session and submission
        transition_delay = os.getenv("QUIZ_TRANSITION_DELAY_MS", "")
        self.QUIZ_TRANSITION_DELAY_MS: int = int(transition_delay) if transition_delay else 300
        submit_limit = os.getenv("SUBMIT_RATE_LIMIT", "")
        self.SUBMIT_RATE_LIMIT: int = int(submit_limit) if submit_limit else 10
        submit_window = os.getenv("SUBMIT_RATE_WINDOW_SECONDS", "")
        self.SUBMIT_RATE_WINDOW_SECONDS: int = int(submit_window) if submit_window else 60

        # Session Configuration
        session_secure = os.getenv("SESSION_COOKIE_SECURE", "")
        self.SESSION_COOKIE_SECURE: bool = session_secure.lower() == "true" if session_secure else False
        session_httponly = os.getenv("SESSION_COOKIE_HTTPONLY", "")
        self.SESSION_COOKIE_HTTPONLY: bool = session_httponly.lower() == "true" if session_httponly else True
        self.SESSION_COOKIE_SAMESITE: str = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")

        # SQLAlchemy Configuration
        self.SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
        sqlalchemy_echo = os.getenv("SQLALCHEMY_ECHO", "")
        self.SQLALCHEMY_ECHO: bool = sqlalchemy_echo.lower() == "true" if sqlalchemy_echo else False

        # Question image uploads
        self.UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
        self.MAX_IMAGE_SIZE: int = int(os.getenv("MAX_IMAGE_SIZE", "1048576"))  # 1MB
        # Convert extensions to lowercase for case-insensitive matching
        allowed_exts_str = os.getenv("ALLOWED_IMAGE_EXTENSIONS", "png,jpg,jpeg,gif,webp")
        self.ALLOWED_IMAGE_EXTENSIONS: set = set(ext.strip().lower() for ext in allowed_exts_str.split(","))

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct database URI from environment variables."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def validate(self) -> None:
        """
        Validate required configuration values.
        Only enforces SECRET_KEY in production environment.
        """
        if not self.SECRET_KEY:
            if self.FLASK_ENV == "production":
                raise ValueError(
                    "SECRET_KEY environment variable is required in production. "
                    "Set it in your .env file or environment variables."
                )
        if self.QUIZ_TRANSITION_DELAY_MS < 0:
            raise ValueError("QUIZ_TRANSITION_DELAY_MS must not be negative")


# Global config instance - will be re-initialized after load_dotenv()
config = Config()
