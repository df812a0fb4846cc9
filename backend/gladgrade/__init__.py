"""
GladGrade backend application factory.

create_app() wires the Flask extensions (SQLAlchemy, Migrate, JWT, CORS,
Limiter), logging, the error handlers, the identity provider and every API
blueprint. Extensions are module level so models and routes can import them.
"""
import os
import logging

from flask import Flask, jsonify, send_from_directory
from flask.logging import default_handler
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy import event
from sqlalchemy.engine import Engine

from gladgrade import config
from gladgrade.utils.error_handler import ErrorHandler

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[limit.strip() for limit in config.RATELIMIT_DEFAULT.split(';') if limit.strip()],
    storage_uri=config.RATELIMIT_STORAGE_URI,
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if type(dbapi_connection).__module__.startswith('sqlite3'):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _configure_logging(app):
    app.logger.removeHandler(default_handler)
    app.logger.setLevel(getattr(logging, app.config['LOG_LEVEL'], logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    existing = {handler.get_name() for handler in app.logger.handlers}
    # root handlers installed by run.py already receive app records
    if 'gladgrade-console' not in existing and not logging.getLogger().handlers:
        console_handler = logging.StreamHandler()
        console_handler.set_name('gladgrade-console')
        console_handler.setFormatter(formatter)
        app.logger.addHandler(console_handler)

    log_file = app.config.get('LOG_FILE')
    if log_file and 'gladgrade-file' not in existing:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.set_name('gladgrade-file')
        file_handler.setFormatter(formatter)
        app.logger.addHandler(file_handler)


def create_app(config_overrides=None):
    app = Flask(__name__, static_folder=None)

    app.config.from_mapping(
        SECRET_KEY=config.SECRET_KEY,
        APP_ENV=config.APP_ENV,
        SQLALCHEMY_DATABASE_URI=config.get_database_uri(),
        SQLALCHEMY_TRACK_MODIFICATIONS=config.SQLALCHEMY_TRACK_MODIFICATIONS,
        SQLALCHEMY_ECHO=config.SQLALCHEMY_ECHO,
        JWT_SECRET_KEY=config.JWT_SECRET_KEY,
        JWT_TOKEN_LOCATION=config.JWT_TOKEN_LOCATION,
        JWT_HEADER_NAME=config.JWT_HEADER_NAME,
        JWT_HEADER_TYPE=config.JWT_HEADER_TYPE,
        JWT_ACCESS_TOKEN_EXPIRES=config.JWT_ACCESS_TOKEN_EXPIRES,
        AUTH_PROVIDER=config.AUTH_PROVIDER,
        FIREBASE_PROJECT_ID=config.FIREBASE_PROJECT_ID,
        FIREBASE_CREDENTIALS=config.FIREBASE_CREDENTIALS,
        UPLOAD_FOLDER=os.path.join(os.path.dirname(app.root_path), config.UPLOAD_FOLDER),
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        MAX_IMAGE_SIZE=config.MAX_IMAGE_SIZE,
        AWS_ACCESS_KEY_ID=config.AWS_ACCESS_KEY_ID,
        AWS_SECRET_ACCESS_KEY=config.AWS_SECRET_ACCESS_KEY,
        S3_BUCKET_NAME=config.S3_BUCKET_NAME,
        S3_ENDPOINT_URL=config.S3_ENDPOINT_URL,
        S3_REGION_NAME=config.S3_REGION_NAME,
        S3_PUBLIC_DOMAIN=config.S3_PUBLIC_DOMAIN,
        RATELIMIT_ENABLED=True,
        GLAD_POINTS_PER_RATING=config.GLAD_POINTS_PER_RATING,
        DEFAULT_PAGE_SIZE=config.DEFAULT_PAGE_SIZE,
        MAX_PAGE_SIZE=config.MAX_PAGE_SIZE,
        LOG_LEVEL=config.LOG_LEVEL,
        LOG_FILE=config.LOG_FILE,
    )
    if config_overrides:
        app.config.update(config_overrides)

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgresql'):
        app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', {
            'pool_size': config.SQLALCHEMY_POOL_SIZE,
            'max_overflow': config.SQLALCHEMY_MAX_OVERFLOW,
            'pool_timeout': config.SQLALCHEMY_POOL_TIMEOUT,
            'pool_recycle': config.SQLALCHEMY_POOL_RECYCLE,
            'pool_pre_ping': True,
        })

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    CORS(app,
         origins=config.CORS_ORIGINS,
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization"],
         supports_credentials=True)

    # Clients are built once per app and shared by every request
    from gladgrade.utils.auth_utils import build_identity_provider
    from gladgrade.utils.storage import ImageStorage
    app.extensions['identity_provider'] = build_identity_provider(app)
    app.extensions['image_storage'] = ImageStorage.from_config(app.config)

    ErrorHandler.register_handlers(app)

    # Import models so metadata is complete before create_all / migrations
    from gladgrade import models  # noqa: F401

    from gladgrade.routes.auth import auth_bp
    from gladgrade.routes.users import users_bp
    from gladgrade.routes.business import business_bp
    from gladgrade.routes.ratings import ratings_bp
    from gladgrade.routes.education import education_bp
    from gladgrade.routes.media import media_bp
    from gladgrade.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(business_bp, url_prefix='/api/business')
    app.register_blueprint(ratings_bp, url_prefix='/api/ratings')
    app.register_blueprint(education_bp, url_prefix='/api/education')
    app.register_blueprint(media_bp, url_prefix='/api/media')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/api/health')
    @limiter.exempt
    def health_check():
        return jsonify({'status': 'ok', 'message': 'Server is running'})

    @app.route('/api/')
    def api_index():
        return jsonify({'message': 'Welcome to GladGrade API', 'version': '1.0.0'})

    @app.route('/static/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and seed roles and image types."""
        from gladgrade.utils.init_db import init_reference_data
        db.create_all()
        created = init_reference_data()
        app.logger.info(f"Database initialized, {created} reference rows added")

    app.logger.info(f"GladGrade app created (auth provider: {app.config['AUTH_PROVIDER']})")
    return app
