from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from helpdesk.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "500 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    from pathlib import Path

    base_dir = Path(__file__).parent
    template_folder = str(base_dir / 'presentation' / 'templates')
    static_folder = str(base_dir / 'presentation' / 'static')

    app = Flask(__name__,
                template_folder=template_folder,
                static_folder=static_folder)

    logger = get_logger("helpdesk")
    logger.info("Initializing Flask application")

    config_overrides = dict(config_overrides or {})

    # SECURITY: Require SECRET_KEY in environment - no fallback
    app.config['SECRET_KEY'] = config_overrides.pop('SECRET_KEY', None) or os.environ.get('SECRET_KEY')
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    # Prefer an explicit DATABASE_URL; otherwise keep the SQLite file in instance/
    instance_dir = base_dir.parent / 'instance'
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'helpdesk.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Uploaded images, signatures and receipt photos
    app.config['UPLOAD_FOLDER'] = os.environ.get('UPLOAD_FOLDER', str(instance_dir / 'uploads'))
    app.config['PUBLIC_UPLOAD_URL'] = os.environ.get('PUBLIC_UPLOAD_URL', '/uploads')
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', str(10 * 1024 * 1024)))

    # WhatsApp (Fonnte) notifications
    app.config['FONNTE_API_KEY'] = os.environ.get('FONNTE_API_KEY')
    app.config['FONNTE_BASE_URL'] = os.environ.get('FONNTE_BASE_URL', 'https://api.fonnte.com')
    app.config['WHATSAPP_COUNTRY_CODE'] = os.environ.get('WHATSAPP_COUNTRY_CODE', '62')
    app.config['WHATSAPP_TIMEOUT'] = int(os.environ.get('WHATSAPP_TIMEOUT', '15'))
    app.config['NOTIFICATIONS_ENABLED'] = _env_flag('NOTIFICATIONS_ENABLED', 'True')
    app.config['INTERNAL_API_KEY'] = os.environ.get('INTERNAL_API_KEY')

    # HTTPS and cookie security (default secure, disable only for development)
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'False')
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))
    app.config['REMEMBER_COOKIE_SECURE'] = _env_flag('REMEMBER_COOKIE_SECURE', 'True')
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True
    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')

    app.config.update(config_overrides)

    if not app.config['ENABLE_HTTPS']:
        logger.warning("HTTPS enforcement disabled - acceptable for development only")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from helpdesk.data import core, assets, atk, tickets  # noqa: F401

    # Outbound notifications are reachable through app.extensions
    from helpdesk.business.notifications.notifier import Notifier
    from helpdesk.business.notifications.whatsapp_client import WhatsAppClient
    app.extensions['helpdesk_notifier'] = Notifier(
        WhatsAppClient(
            api_key=app.config['FONNTE_API_KEY'],
            base_url=app.config['FONNTE_BASE_URL'],
            country_code=app.config['WHATSAPP_COUNTRY_CODE'],
            timeout=app.config['WHATSAPP_TIMEOUT'],
        ),
        enabled=app.config['NOTIFICATIONS_ENABLED'],
    )

    # Register blueprints
    from helpdesk.auth import auth
    from helpdesk.presentation.routes import main
    from helpdesk.presentation.routes import init_app as init_routes

    app.register_blueprint(auth)
    app.register_blueprint(main)
    init_routes(app)

    @app.template_global()
    def endpoint_exists(endpoint):
        """Check if a route endpoint exists"""
        return endpoint in [rule.endpoint for rule in app.url_map.iter_rules()]

    @app.before_request
    def enforce_https():
        """Redirect HTTP requests to HTTPS if HTTPS enforcement is enabled"""
        if app.config.get('ENABLE_HTTPS'):
            from flask import request, redirect
            if not request.is_secure and request.headers.get('X-Forwarded-Proto') != 'https':
                return redirect(request.url.replace('http://', 'https://', 1), code=301)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "img-src 'self' data: https:; "
            "font-src 'self' data:;"
        )
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    @app.errorhandler(403)
    def forbidden(error):
        from flask import render_template
        return render_template('errors/403.html'), 403

    @app.errorhandler(404)
    def not_found(error):
        from flask import render_template
        return render_template('errors/404.html'), 404

    logger.info("Flask application initialization complete")

    return app
