# ==========================================================================================================
# -------------- Configuration file for the Membership backend ---------------------------------------------
# ==========================================================================================================
import os
from dotenv import load_dotenv


if os.environ.get("FLASK_ENV") != "production":
    load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default="False"):
    return os.getenv(name, default).lower() in ("true", "1", "t")


def _database_url():
    url = os.getenv("DATABASE_URL")
    if not url:
        url = f"sqlite:///{os.path.join(basedir, 'instance', 'members.db')}"

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+pg8000://", 1)
    return url


class Config:

    SECRET_KEY = os.getenv("SECRET_KEY")
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))

    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = _env_bool("DEBUG")
    TESTING = False

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {} if SQLALCHEMY_DATABASE_URI.startswith("sqlite") else {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # Uploads: member images live in UPLOAD_FOLDER, event images in UPLOAD_FOLDER/events
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(basedir, "uploads"))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    DEFAULT_ZONE_ID = int(os.getenv("DEFAULT_ZONE_ID", "1"))

    # Placeholder credentials kept for client parity, see DESIGN.md
    MASTER_PASSWORD = os.getenv("MASTER_PASSWORD", "password123")
    MOCK_OTP = os.getenv("MOCK_OTP", "1234")
    ECHO_OTP = _env_bool("ECHO_OTP")

    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE = _env_bool("LOG_TO_FILE", "True")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    PORT = int(os.getenv("PORT", "5000"))


class TestingConfig(Config):

    TESTING = True
    DEBUG = False
    FLASK_ENV = "testing"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET = "test-jwt-secret"

    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    UPLOAD_FOLDER = os.path.join(basedir, "instance", "test-uploads")

    LOG_TO_FILE = False
    LOG_LEVEL = "WARNING"
