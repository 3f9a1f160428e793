import os
from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException
from config import Config
from extensions import db, init_extensions
from logger import setup_app_logging


# --------------------------------------------------------------------------------------------------------
#       Application factory
# --------------------------------------------------------------------------------------------------------
def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("SECRET_KEY"):
        raise ValueError("SECRET_KEY is not set. Define it in the environment or .env file.")

    setup_app_logging(app)

    # --------------------------------------------------------------------------------------------------------------------------
    # Initialize extensions
    # ----------------------------------------------------------------------------------------------------------------------------
    init_extensions(app)

    from blueprints.access import TokenService
    app.extensions["token_service"] = TokenService(
        app.config.get("JWT_SECRET") or app.config["SECRET_KEY"],
        app.config.get("JWT_EXPIRES_HOURS", 24),
    )

    register_blueprints(app)
    register_error_handlers(app)

    # ----------------------
    # Basic routes
    # ----------------------
    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    app.logger.info(f"Membership backend started ({app.config.get('FLASK_ENV')})")
    return app


# ------------------------------------------------------------------------------------------------------------------------
# Register blueprints
# -----------------------------------------------------------------------------------------------------------------------
def register_blueprints(app):
    # Importing access registers the Flask-Login request loader
    import blueprints.access  # noqa: F401
    from blueprints.admin import admin_bp
    from blueprints.admin_members import members_bp
    from blueprints.admin_zones import zones_bp
    from blueprints.admin_events import events_bp
    from blueprints.auth import bp as auth_bp
    from blueprints.mobile_members import mobile_members_bp
    from blueprints.notifications import notifications_bp

    app.register_blueprint(admin_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(zones_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(mobile_members_bp)
    app.register_blueprint(notifications_bp)


def register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if e.code == 413:
            message = "File too large"
        else:
            message = e.description if e.code != 404 else "Route not found"
        return jsonify({"error": message}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {e}", exc_info=True)
        return jsonify({"error": "Something went wrong!"}), 500


# ----------------------
# Local development
# ----------------------
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", app.config.get("PORT", 5000)))
    debug_mode = app.config.get("DEBUG", False)
    app.run(debug=debug_mode, host="0.0.0.0", port=port)
