"""
Error handling for the GladGrade API.

- AppError and its subclasses are operational errors: their message and
  status go to the client unchanged.
- Database errors are classified by SQLSTATE (or the SQLite message) into
  503 / 500 / 409 / 400 responses.
- Every error response uses the envelope
  {"error": {"message": ..., "status": ..., "stack": ...}}, where "stack" is
  only present in development.
- Error counts are kept per status code and endpoint for the admin
  error-stats endpoint.
"""
import re
import time
import threading
import traceback
from collections import defaultdict, Counter
from datetime import datetime

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError, ProgrammingError


class AppError(Exception):
    """An error whose message and status are safe to show to the client."""

    status = 500

    def __init__(self, message, status=None, original=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.original = original


class BadRequestError(AppError):
    status = 400


class UnauthorizedError(AppError):
    status = 401


class ForbiddenError(AppError):
    status = 403


class NotFoundError(AppError):
    status = 404


class ConflictError(AppError):
    status = 409


CONNECTION_ERROR_CODES = {'08003', '08006', '57P01'}
UNDEFINED_TABLE_CODE = '42P01'
UNIQUE_VIOLATION_CODE = '23505'
FOREIGN_KEY_VIOLATION_CODE = '23503'
NOT_NULL_VIOLATION_CODE = '23502'


def _sqlstate(error):
    orig = getattr(error, 'orig', None)
    return getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)


def is_unique_violation(error):
    """True when an IntegrityError comes from a unique constraint."""
    if not isinstance(error, IntegrityError):
        return False
    code = _sqlstate(error)
    if code:
        return code == UNIQUE_VIOLATION_CODE
    return 'UNIQUE' in str(error.orig).upper()


def classify_db_error(error):
    """Map a SQLAlchemy error to (status, client message)."""
    code = _sqlstate(error)
    detail = str(getattr(error, 'orig', error))
    if code in CONNECTION_ERROR_CODES:
        return 503, 'Database connection error'
    if code == UNDEFINED_TABLE_CODE or 'no such table' in detail or isinstance(error, ProgrammingError):
        return 500, 'Database query error'
    if isinstance(error, IntegrityError):
        if is_unique_violation(error):
            return 409, 'Duplicate entry'
        if code == FOREIGN_KEY_VIOLATION_CODE or 'FOREIGN KEY' in detail.upper():
            return 400, 'Referenced record does not exist'
        if code == NOT_NULL_VIOLATION_CODE or 'NOT NULL' in detail.upper():
            return 400, 'Missing required value'
    if isinstance(error, OperationalError) or getattr(error, 'connection_invalidated', False):
        return 503, 'Database connection error'
    return 500, 'Internal Server Error'


_error_lock = threading.Lock()
_error_stats = {
    'last_reset': time.time(),
    'total_count': 0,
    'by_code': defaultdict(int),
    'by_endpoint': defaultdict(int),
    'recent_errors': [],
    'ip_count': Counter(),
}

MAX_RECENT_ERRORS = 100
MAX_TRACKED_IPS = 500


class ErrorHandler:
    """Registers the JSON error handlers and keeps error statistics."""

    @staticmethod
    def register_handlers(app):

        @app.errorhandler(AppError)
        def handle_app_error(e):
            if e.status >= 500:
                current_app.logger.error(f"{request.method} {request.path} -> {e.status}: {e.message}",
                                         exc_info=e.original or e)
            else:
                current_app.logger.warning(f"{request.method} {request.path} -> {e.status}: {e.message}")
            return ErrorHandler._respond(e.status, e.message, e)

        @app.errorhandler(SQLAlchemyError)
        def handle_db_error(e):
            from gladgrade import db
            db.session.rollback()
            status, message = classify_db_error(e)
            if status >= 500:
                current_app.logger.error(f"Database error on {request.method} {request.path}: {e}", exc_info=e)
            else:
                current_app.logger.warning(f"Database constraint error on {request.path}: {e.orig}")
            return ErrorHandler._respond(status, message, e)

        @app.errorhandler(HTTPException)
        def handle_http_exception(e):
            message = e.description or e.name
            if e.code == 413:
                message = 'File too large'
            return ErrorHandler._respond(e.code, message, e)

        @app.errorhandler(Exception)
        def handle_unexpected_error(e):
            current_app.logger.error(f"Unhandled error on {request.method} {request.path}: {e}\n"
                                     f"{traceback.format_exc()}")
            return ErrorHandler._respond(500, 'Internal Server Error', e)

    @staticmethod
    def _respond(status, message, error):
        ErrorHandler._record_error(status, request.path, request.method, request.remote_addr, message)
        body = {'message': message, 'status': status}
        if current_app.config.get('APP_ENV') == 'development' or current_app.debug:
            body['stack'] = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        return jsonify({'error': body}), status

    @staticmethod
    def _record_error(status_code, path, method, client_ip, error_msg):
        with _error_lock:
            _error_stats['total_count'] += 1
            _error_stats['by_code'][status_code] += 1
            _error_stats['by_endpoint'][ErrorHandler._simplify_path(path)] += 1
            _error_stats['ip_count'][client_ip] += 1
            if len(_error_stats['ip_count']) > MAX_TRACKED_IPS:
                _error_stats['ip_count'] = Counter(dict(_error_stats['ip_count'].most_common(MAX_TRACKED_IPS)))

            _error_stats['recent_errors'].append({
                'timestamp': datetime.utcnow().isoformat(),
                'status_code': status_code,
                'path': path,
                'method': method,
                'client_ip': client_ip,
                'message': error_msg,
            })
            if len(_error_stats['recent_errors']) > MAX_RECENT_ERRORS:
                _error_stats['recent_errors'] = _error_stats['recent_errors'][-MAX_RECENT_ERRORS:]

    @staticmethod
    def _simplify_path(path):
        """Replace numeric ids with a placeholder so endpoints group together."""
        return re.sub(r'/\d+', '/{id}', path)

    @staticmethod
    def get_error_stats():
        with _error_lock:
            return {
                'total_count': _error_stats['total_count'],
                'by_code': dict(_error_stats['by_code']),
                'by_endpoint': dict(_error_stats['by_endpoint']),
                'recent_errors': _error_stats['recent_errors'][-20:],
                'top_ips': dict(_error_stats['ip_count'].most_common(10)),
                'last_reset': _error_stats['last_reset'],
            }

    @staticmethod
    def reset_stats():
        with _error_lock:
            _error_stats['last_reset'] = time.time()
            _error_stats['total_count'] = 0
            _error_stats['by_code'] = defaultdict(int)
            _error_stats['by_endpoint'] = defaultdict(int)
            _error_stats['recent_errors'] = []
            _error_stats['ip_count'] = Counter()

        return {'success': True, 'message': 'Error statistics reset'}
