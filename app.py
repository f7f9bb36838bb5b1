"""
Flask application factory for the voice assistant chat proxy.

Usage:
    from app import create_app
    app = create_app()

This factory pattern allows:
- Blueprint registration (routes/chat.py)
- Test isolation via config_override
- Clean extension initialization
"""
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix

from config.loader import config

logger = logging.getLogger(__name__)

# Chat bodies are a single short prompt
_MAX_BODY_BYTES = 64 * 1024  # 64 KB


def create_app(config_override: dict = None):
    """
    Create and configure the Flask application.

    Args:
        config_override: Optional dict of Flask config values to apply.
                         Primarily used in tests to inject TESTING=True etc.

    Returns:
        Flask: the configured app with chat and health routes registered.
    """
    app = Flask(__name__, static_folder=None)

    # Core Flask config
    secret_key = os.getenv('SECRET_KEY')
    if not secret_key:
        import secrets as _secrets
        secret_key = _secrets.token_hex(32)
        logger.warning('No SECRET_KEY set — generated a random key for this session.')
    app.config['SECRET_KEY'] = secret_key
    app.config['MAX_CONTENT_LENGTH'] = _MAX_BODY_BYTES

    # Apply test / caller overrides last so they take precedence
    if config_override:
        app.config.update(config_override)

    # Trust one level of X-Forwarded-* headers so per-IP limits see the
    # client address behind a reverse proxy.
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Any localhost port for dev; extra origins via CORS_ORIGINS (comma-separated)
    _extra_origins = [o.strip() for o in os.getenv('CORS_ORIGINS', '').split(',') if o.strip()]
    CORS(app, origins=[
        r'^http://localhost:\d+$',
        r'^http://127\.0\.0\.1:\d+$',
        *_extra_origins,
    ])

    # ── Rate limiting ─────────────────────────────────────────────────────────
    # Disable for tests: config_override={'RATELIMIT_ENABLED': False}.
    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[os.getenv('RATELIMIT_DEFAULT', '200 per minute')],
        storage_uri='memory://',
    )
    app.limiter = limiter

    # ── Blueprints ────────────────────────────────────────────────────────────
    from routes.chat import chat_bp
    app.register_blueprint(chat_bp)
    _register_health_routes(app)

    # limiter.limit() returns a wrapped function; it must be assigned back
    # into app.view_functions or the limit is discarded.
    for endpoint, rate in {
        'chat.chat': config.get('chat.rate_limit', '30/minute'),
    }.items():
        view_fn = app.view_functions.get(endpoint)
        if view_fn:
            app.view_functions[endpoint] = limiter.limit(rate)(view_fn)
        else:
            logger.warning("Rate limit: endpoint %r not found — skipping", endpoint)

    # ── Security headers ──────────────────────────────────────────────────────
    @app.after_request
    def add_security_headers(response):
        """Add defensive HTTP security headers to every response."""
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('X-Frame-Options', 'SAMEORIGIN')
        response.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
        # Voice capture needs the microphone; nothing else
        response.headers.setdefault(
            'Permissions-Policy', 'camera=(), microphone=(self), geolocation=()'
        )
        return response

    return app


def _register_health_routes(app):
    from services.health import health_checker

    @app.route('/health/live', methods=['GET'])
    def health_live():
        """Liveness probe — always 200 while the process is up."""
        result = health_checker.liveness()
        return jsonify({'healthy': result.healthy, 'message': result.message, 'details': result.details}), 200

    @app.route('/health/ready', methods=['GET'])
    def health_ready():
        """Readiness probe — 503 until the chat provider is configured."""
        result = health_checker.readiness()
        code = 200 if result.healthy else 503
        return jsonify({'healthy': result.healthy, 'message': result.message, 'details': result.details}), code
