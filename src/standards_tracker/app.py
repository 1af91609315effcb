"""Flask application factory."""

import logging
import os
import threading
from pathlib import Path

from flask import Flask, jsonify
from flask_wtf.csrf import CSRFProtect
from werkzeug.middleware.proxy_fix import ProxyFix

from standards_tracker.catalogue import Catalogue
from standards_tracker.errors import CatalogueError
from standards_tracker.models import db
from standards_tracker.sample_data import SAMPLE_GROUPS, SAMPLE_STAFF, SAMPLE_STANDARDS
from standards_tracker.storage import GROUPS_KEY, STAFF_KEY, STANDARDS_KEY, DatabaseStore

logger = logging.getLogger(__name__)

csrf = CSRFProtect()


def create_app(test_config=None):
    app = Flask(__name__)

    # Database: prefer DATABASE_URL, fall back to SQLite
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        # Some hosts still issue postgres:// which SQLAlchemy rejects
        if db_url.startswith("postgres://"):
            db_url = db_url.replace("postgres://", "postgresql://", 1)
    else:
        db_path = os.environ.get(
            "STANDARDS_DB_PATH",
            str(Path(__file__).resolve().parent.parent.parent / "data" / "standards.db"),
        )
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        db_url = f"sqlite:///{db_path}"

    app.config["SQLALCHEMY_DATABASE_URI"] = db_url
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-key-change-in-production")
    app.config["SEED_SAMPLE_DATA"] = os.environ.get("SEED_SAMPLE_DATA", "false").lower() in ("1", "true", "yes")

    if test_config:
        app.config.update(test_config)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    db.init_app(app)
    csrf.init_app(app)

    with app.app_context():
        try:
            db.create_all()
        except Exception as exc:
            if not _is_duplicate_ddl_error(exc):
                raise
            logger.debug("create_all: some tables already exist (concurrent worker startup), continuing: %s", exc)

        store = DatabaseStore()
        if app.config.get("SEED_SAMPLE_DATA"):
            _seed_sample_catalogue(store)
        catalogue = Catalogue.load(store)
        app.extensions["catalogue"] = catalogue
        # One caller at a time: reads and mutations share this lock
        app.extensions["catalogue_lock"] = threading.Lock()

        logger.info(
            "Startup: db=%s standards=%d groups=%d",
            db.engine.dialect.name, len(catalogue.standards()), len(catalogue.groups()),
        )

    from standards_tracker.routes.assignments import bp as assignments_bp
    from standards_tracker.routes.groups import bp as groups_bp
    from standards_tracker.routes.health import bp as health_bp
    from standards_tracker.routes.standards import bp as standards_bp
    from standards_tracker.routes.staff import bp as staff_bp

    app.register_blueprint(standards_bp)
    app.register_blueprint(groups_bp)
    app.register_blueprint(assignments_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(CatalogueError)
    def handle_catalogue_error(exc):
        logger.info("Rejected: %s (%s)", exc.message, type(exc).__name__)
        return jsonify(exc.to_dict()), exc.status_code

    return app


def _is_duplicate_ddl_error(exc: Exception) -> bool:
    """Return True if *exc* indicates a DDL object (table/column) already exists.

    Covers both SQLite ('already exists') and PostgreSQL ('already exists',
    'duplicate table') error messages.
    """
    msg = str(exc).lower()
    return any(kw in msg for kw in ("already exists", "duplicate column", "duplicate table"))


def _seed_sample_catalogue(store) -> bool:
    """Store the sample groups and standards if the catalogue is still empty.

    Existing data is never overwritten.  Returns True if the sample was stored.
    """
    if store.load(STANDARDS_KEY) or store.load(GROUPS_KEY):
        logger.debug("Sample seed skipped: catalogue already has data")
        return False
    store.save_many({
        GROUPS_KEY: SAMPLE_GROUPS,
        STANDARDS_KEY: SAMPLE_STANDARDS,
        STAFF_KEY: SAMPLE_STAFF,
    })
    logger.info(
        "Seeded sample catalogue: groups=%d standards=%d staff=%d",
        len(SAMPLE_GROUPS), len(SAMPLE_STANDARDS), len(SAMPLE_STAFF),
    )
    return True
