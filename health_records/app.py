import logging
import time

from flask import Flask, current_app, g, request
from flask_cors import CORS

from health_records.access import SharingEngine
from health_records.cli import register_commands
from health_records.config import Config
from health_records.errors import register_error_handlers
from health_records.extensions import db, jwt, migrate
from health_records.files import build_file_store
from health_records.routes.auth import auth_bp, register_jwt_callbacks
from health_records.routes.reports import reports_bp
from health_records.routes.shares import shares_bp
from health_records.routes.vitals import vitals_bp
from health_records.store import SQLAlchemyRecordStore
from health_records.vitals import VitalsSeries


def create_app(config_object=Config):
    app = Flask(__name__)
    logging.basicConfig(level=logging.INFO)

    app.config.from_object(config_object)
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}, supports_credentials=True)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    register_jwt_callbacks(jwt)

    store = SQLAlchemyRecordStore(db)
    app.extensions["record_store"] = store
    app.extensions["sharing_engine"] = SharingEngine(store)
    app.extensions["vitals_series"] = VitalsSeries(store, default_limit=app.config["VITALS_DEFAULT_LIMIT"])
    app.extensions["file_store"] = build_file_store(app.config)

    app.register_blueprint(auth_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(vitals_bp)
    app.register_blueprint(shares_bp)

    register_error_handlers(app)
    register_commands(app)
    _log_requests(app)
    return app


def _log_requests(app):
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        if request.path.startswith("/api"):
            started = g.get("request_started", time.perf_counter())
            duration = (time.perf_counter() - started) * 1000
            current_app.logger.info(
                f"{request.method} {request.path} {response.status_code} in {duration:.0f}ms"
            )
        return response


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5000, debug=app.config["DEBUG"])
