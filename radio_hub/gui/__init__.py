"""
Flask JSON API for Radio Hub

Exposes the command layer (radio_hub.commands) over HTTP for a UI shell:
- Station listings per source (cached and live)
- Stream URL resolution and now-playing refresh
- Favorites

The app holds no state of its own; everything goes through the
RadioCommands instance stored in app.config['commands'].
"""

import logging
from flask import Flask

logger = logging.getLogger(__name__)


def create_app(commands):
    """Create the Flask app

    Args:
        commands: RadioCommands instance

    Returns:
        Flask app
    """
    app = Flask(__name__)
    app.config['commands'] = commands
    app.json.sort_keys = False

    try:
        from radio_hub import get_version
        app.config['VERSION'] = get_version()
    except ImportError:
        app.config['VERSION'] = 'unknown'

    from radio_hub.gui.routes.stations import stations_bp
    app.register_blueprint(stations_bp)

    logger.info("Flask app initialized")
    return app


def run_app(commands, host='127.0.0.1', port=5000, debug=False):
    """Run the API server (blocking)"""
    app = create_app(commands)
    logger.info(f"Starting API server on http://{host}:{port}")
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
