"""
project: floorgen
module: server.py
License: MIT

Server bootstrap: logging setup and the development HTTP server.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from floorgen import create_app


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Start the Flask development server with file + console logging configured."""
    app = create_app()
    _configure_logging(app)
    try:
        print(f"[INFO] Starting floorgen server on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging(app):
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/floorgen.log. Retains a few backups to avoid growth.
    Calling it again replaces the handlers instead of stacking them.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "floorgen.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)

    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
