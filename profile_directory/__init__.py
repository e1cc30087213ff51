"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
import hmac
import importlib

from flask import Flask, request, session, jsonify


# Paths that change data or expose import internals; everything else is public
ADMIN_PATHS = {
    '/upload-file',
    '/update-account',
    '/update-account-date',
    '/update-photo',
    '/delete-account',
    '/account-edit-media',
    '/reports',
    '/delete-reports',
    '/get-admin-orders',
    '/update-orders',
    '/delete-orders',
    '/save-sections',
    '/add-role',
    '/delete-user',
}
ADMIN_PREFIXES = ('/api/imports',)

MODEL_MODULES = [
    'profile_directory.models.account',
    'profile_directory.models.city',
    'profile_directory.models.tag',
    'profile_directory.models.social',
    'profile_directory.models.user',
    'profile_directory.models.comment',
    'profile_directory.models.favorite',
    'profile_directory.models.rating',
    'profile_directory.models.import_run',
    'profile_directory.models.message',
    'profile_directory.models.report',
    'profile_directory.models.order',
    'profile_directory.models.section',
]


def _is_admin_path(path):
    return path in ADMIN_PATHS or path.startswith(ADMIN_PREFIXES)


def _password_ok(candidate, expected):
    return bool(candidate) and hmac.compare_digest(candidate.encode(), expected.encode())


def is_admin_request():
    """True when the current request carries moderator rights (always, with no password set)."""
    from profile_directory import config
    password = config.ADMIN_PASSWORD
    if not password:
        return True
    if session.get('authenticated'):
        return True
    return _password_ok(request.headers.get('X-Admin-Password'), password)


def create_app():
    """Create and configure the Flask application."""
    from profile_directory import config
    from profile_directory.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.secret_key = config.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_MB * 1024 * 1024

    # ── Simple password auth for admin routes ───────────────────────────
    @app.before_request
    def require_admin():
        if not _is_admin_path(request.path):
            return
        if is_admin_request():  # open access with no password set (local dev)
            return
        return jsonify({'message': 'Нет доступа'}), 401

    @app.route('/login', methods=['POST'])
    def login():
        data = request.get_json(silent=True) or request.form
        password = config.ADMIN_PASSWORD
        if password and _password_ok(data.get('password'), password):
            session['authenticated'] = True
            return jsonify({'ok': True})
        return jsonify({'ok': False, 'message': 'Wrong password'}), 401

    @app.route('/logout', methods=['POST'])
    def logout():
        session.clear()
        return jsonify({'ok': True})

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({'error': f'Файл больше {config.MAX_UPLOAD_MB} МБ'}), 413

    # Register blueprints
    from profile_directory.routes.imports import bp as imports_bp
    from profile_directory.routes.accounts import bp as accounts_bp
    from profile_directory.routes.lookups import bp as lookups_bp
    from profile_directory.routes.community import bp as community_bp
    from profile_directory.routes.messages import bp as messages_bp
    from profile_directory.routes.reports import bp as reports_bp
    from profile_directory.routes.orders import bp as orders_bp
    from profile_directory.routes.sections import bp as sections_bp
    from profile_directory.routes.users import bp as users_bp

    app.register_blueprint(imports_bp)
    app.register_blueprint(accounts_bp)
    app.register_blueprint(lookups_bp)
    app.register_blueprint(community_bp)
    app.register_blueprint(messages_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(sections_bp)
    app.register_blueprint(users_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic, no init_db() call.
    for module in MODEL_MODULES:
        importlib.import_module(module)

    return app
