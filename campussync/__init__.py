import os
import logging
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from campussync.config import DevelopmentConfig, ProductionConfig, TestingConfig
from datetime import timedelta

app = Flask(__name__, instance_relative_config=True)

# Select config based on FLASK_ENV
env = os.environ.get("FLASK_ENV", "development").lower()
if env == "production":
    app.config.from_object(ProductionConfig)
elif env == "testing":
    app.config.from_object(TestingConfig)
else:
    app.config.from_object(DevelopmentConfig)

# Compute DB URI for development using instance path
if env not in ("production", "testing"):
    os.makedirs(app.instance_path, exist_ok=True)
    app.config['SQLALCHEMY_DATABASE_URI'] = DevelopmentConfig.database_uri(app.instance_path)

logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))
logger = logging.getLogger(__name__)

db = SQLAlchemy(app)

# Configure session lifetime
app.permanent_session_lifetime = timedelta(minutes=int(app.config['SESSION_TIMEOUT_MINUTES']))

from campussync import models  # noqa: E402
from campussync.auth import bootstrap_admin  # noqa: E402
from campussync.errors import CampusSyncError  # noqa: E402

try:
    with app.app_context():
        db.create_all()
        bootstrap_admin()
except (SQLAlchemyError, CampusSyncError):
    logger.exception("Database initialisation failed")

from campussync import routes  # noqa: E402,F401
