import os

class BaseConfig:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PASSWORD_MIN_LENGTH = int(os.environ.get("PASSWORD_MIN_LENGTH", 8))
    SESSION_TIMEOUT_MINUTES = int(os.environ.get("SESSION_TIMEOUT_MINUTES", 120))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

class DevelopmentConfig(BaseConfig):
    # Default to instance/campussync.db unless overridden
    @staticmethod
    def database_uri(instance_path: str) -> str:
        db_path = os.environ.get("DATABASE_PATH")
        if db_path:
            return f"sqlite:///{db_path}"
        return "sqlite:///" + os.path.join(instance_path, "campussync.db")

class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URI", "sqlite:///:memory:")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").upper()

class ProductionConfig(BaseConfig):
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URI", "sqlite:///campussync.db")
    SESSION_COOKIE_SECURE = True
