"""Initialize the Flask app, Firebase and the real-time relay."""

import json
import os

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials, firestore
from flask import Flask, current_app, g, request
from werkzeug.middleware.proxy_fix import ProxyFix

from .realtime import STREAM_ENDPOINTS
from .realtime.relay import create_relay


def _init_firebase(app):
    """Initialize the Firebase Admin SDK from env, file or default credentials."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    if cred and not firebase_admin._apps:
        try:
            options = {"projectId": project_id} if project_id else None
            firebase_admin.initialize_app(cred, options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")


def _request_token():
    """Return the bearer token sent with the request, if any.

    EventSource cannot set headers, so the stream endpoints also accept the
    token as an ``access_token`` query parameter.
    """
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer ") :]
    if request.endpoint in STREAM_ENDPOINTS:
        return request.args.get("access_token")
    return None


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        RELAY_BACKEND=os.environ.get("RELAY_BACKEND") or "redis",
        REDIS_URL=os.environ.get("REDIS_URL") or "redis://localhost:6379/0",
        RELAY_CHANNEL_PREFIX=os.environ.get("RELAY_CHANNEL_PREFIX") or "devconnect:",
        RELAY_KEEPALIVE_SECONDS=float(os.environ.get("RELAY_KEEPALIVE_SECONDS") or 15),
        RELAY_HISTORY_SIZE=int(os.environ.get("RELAY_HISTORY_SIZE") or 100),
        NOTIFICATION_PAGE_SIZE=int(os.environ.get("NOTIFICATION_PAGE_SIZE") or 50),
        LOG_LEVEL=os.environ.get("LOG_LEVEL") or "INFO",
    )

    if test_config:
        app.config.update(test_config)
        if app.config.get("TESTING") and "RELAY_BACKEND" not in test_config:
            app.config["RELAY_BACKEND"] = "memory"

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        _init_firebase(app)

    app.extensions["relay"] = create_relay(app.config)

    # Register blueprints
    from . import auth as auth_bp

    app.register_blueprint(auth_bp.bp)

    from . import user as user_bp

    app.register_blueprint(user_bp.bp)

    from . import project as project_bp

    app.register_blueprint(project_bp.bp)

    from . import message as message_bp

    app.register_blueprint(message_bp.bp)

    from . import notification as notification_bp

    app.register_blueprint(notification_bp.bp)

    from . import realtime as realtime_bp

    app.register_blueprint(realtime_bp.bp)

    from . import admin as admin_bp

    app.register_blueprint(admin_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    @app.before_request
    def load_logged_in_user():
        """Verify the bearer token, if any, and store its user in g."""
        g.user = None
        token = _request_token()
        if not token:
            return

        try:
            decoded_token = firebase_auth.verify_id_token(token)
        except (
            firebase_auth.InvalidIdTokenError,
            firebase_auth.UserDisabledError,
            ValueError,
        ) as e:
            current_app.logger.warning(f"Rejected bearer token: {e}")
            return

        uid = decoded_token["uid"]
        db = firestore.client()
        user_doc = db.collection("users").document(uid).get()
        if not user_doc.exists:
            current_app.logger.warning(f"Token for {uid} but no user in Firestore.")
            return

        user = user_doc.to_dict()
        if user.get("isBlocked"):
            current_app.logger.warning(f"Blocked user {uid} attempted access.")
            return
        g.user = user
        g.user["uid"] = uid  # Ensure uid is in the user object

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
