import os
import tempfile
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()


def _flag(name, default="False"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    SQLALCHEMY_DATABASE_URI     = os.getenv("DATABASE_URL", "sqlite:///health_wallet.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY              = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-change-me-before-deploying")
    JWT_ACCESS_TOKEN_EXPIRES    = timedelta(seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", "3600")))
    JWT_TOKEN_LOCATION          = ["headers", "cookies"]
    JWT_COOKIE_SECURE           = _flag("JWT_COOKIE_SECURE")
    JWT_COOKIE_CSRF_PROTECT     = _flag("JWT_COOKIE_CSRF_PROTECT", "True")

    SECRET_KEY                  = os.getenv("FLASK_SECRET_KEY", "dev-flask-secret-change-me-before-deploying")
    DEBUG                       = os.getenv("FLASK_DEBUG") == "True"

    CORS_ORIGINS                = os.getenv("CORS_ORIGINS", "*")

    # 10MB upload limit
    MAX_CONTENT_LENGTH          = 10 * 1024 * 1024

    REPORT_STORAGE              = os.getenv("REPORT_STORAGE", "local")
    UPLOAD_FOLDER               = os.getenv("UPLOAD_FOLDER", "uploads")
    AWS_REGION                  = os.getenv("AWS_REGION")
    S3_BUCKET_NAME              = os.getenv("S3_BUCKET_NAME")

    VITALS_DEFAULT_LIMIT        = int(os.getenv("VITALS_DEFAULT_LIMIT", "50"))


class TestConfig(Config):
    TESTING                     = True
    SQLALCHEMY_DATABASE_URI     = "sqlite:///:memory:"
    JWT_COOKIE_CSRF_PROTECT     = False
    REPORT_STORAGE              = "local"
    UPLOAD_FOLDER               = os.path.join(tempfile.gettempdir(), "health_records_test_uploads")
