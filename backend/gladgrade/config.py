"""
GladGrade configuration.

All settings come from the process environment (a local .env file is loaded
first). create_app() copies these values into app.config; tests pass
overrides instead of touching the environment.
"""
import os
from dotenv import load_dotenv

# Load .env before reading settings
load_dotenv()

# API
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('PORT', os.getenv('API_PORT', 5000)))
API_DEBUG = os.getenv('API_DEBUG', 'False').lower() == 'true'
APP_ENV = os.getenv('APP_ENV', os.getenv('NODE_ENV', 'production'))

# Security
SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key_12345')
JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt_secret_key_67890')
JWT_ACCESS_TOKEN_EXPIRES = 60 * 60 * 24  # 1 day
JWT_TOKEN_LOCATION = ['headers']
JWT_HEADER_NAME = 'Authorization'
JWT_HEADER_TYPE = 'Bearer'

# Identity provider: "firebase" in production, "jwt" for local development and tests
AUTH_PROVIDER = os.getenv('AUTH_PROVIDER', 'firebase').lower()
FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID', 'reactgladgrade')
FIREBASE_CREDENTIALS = os.getenv('GOOGLE_APPLICATION_CREDENTIALS')

# Database
DATABASE_URL = os.getenv('DATABASE_URL')
DB_TYPE = os.getenv('DB_TYPE', 'postgresql')
DB_USER = os.getenv('DB_USER', 'postgres')
DB_PASSWORD = os.getenv('DB_PASSWORD', '')
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_NAME = os.getenv('DB_NAME', 'gladgrade')
SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'False').lower() == 'true'

SQLALCHEMY_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', 20))
SQLALCHEMY_MAX_OVERFLOW = 10
SQLALCHEMY_POOL_TIMEOUT = 30      # seconds
SQLALCHEMY_POOL_RECYCLE = 1800    # seconds

# Uploads
UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', 'uploads')
MAX_IMAGE_SIZE = 5 * 1024 * 1024
MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', MAX_IMAGE_SIZE + 64 * 1024))

# S3-compatible object storage; local disk is used when these are not set
AWS_ACCESS_KEY_ID = os.getenv('AWS_ACCESS_KEY_ID')
AWS_SECRET_ACCESS_KEY = os.getenv('AWS_SECRET_ACCESS_KEY')
S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME')
S3_ENDPOINT_URL = os.getenv('S3_ENDPOINT_URL')
S3_REGION_NAME = os.getenv('S3_REGION_NAME')
S3_PUBLIC_DOMAIN = os.getenv('S3_PUBLIC_DOMAIN')

# Rate limiting
RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '10000 per day;3000 per hour')
RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')

# Rewards and paging
GLAD_POINTS_PER_RATING = int(os.getenv('GLAD_POINTS_PER_RATING', 10))
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE')

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5173').split(',')
    if origin.strip()
]


def get_database_uri():
    """Build the SQLAlchemy database URI."""
    if DATABASE_URL:
        return DATABASE_URL
    if DB_TYPE == 'postgresql':
        return f'postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
    return 'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'gladgrade.db')
