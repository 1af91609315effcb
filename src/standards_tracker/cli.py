"""CLI entry point for the standards tracker."""

import logging
import os

from standards_tracker.app import create_app


def main():
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    app = create_app()
    debug = os.environ.get("FLASK_DEBUG", "false").lower() in ("1", "true", "yes")
    app.run(debug=debug, port=int(os.environ.get("PORT", "5000")))


if __name__ == "__main__":
    main()
