import os
import logging
from flask import Flask
from routes.dashboard_routes import dashboard_bp, dashboard_response, no_data_response
import config

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')


def create_app():
    """Create and configure the Flask application"""
    app = Flask(__name__, template_folder=TEMPLATE_DIR)

    app.register_blueprint(dashboard_bp)

    # Methods outside the route list still get the dashboard
    @app.errorhandler(405)
    def method_not_allowed(error):
        return dashboard_response()

    @app.errorhandler(500)
    def server_error(error):
        logger.exception("An error occurred during a request.")
        return no_data_response()

    logger.info(f"Telemetry stream: {config.TELEMETRY_FILE}")
    logger.info(f"Tail read size: {config.READ_CHUNK_SIZE} bytes")

    if not os.path.exists(config.TELEMETRY_FILE):
        logger.warning(f"Telemetry stream {config.TELEMETRY_FILE} does not exist yet, "
                       f"start {config.SYSMON_WORKER_SCRIPT_PATH} to produce it")

    return app


if __name__ == '__main__':
    config.validate_config()

    app = create_app()

    try:
        logger.info(f"Starting dashboard server: {config.HOST}:{config.PORT}")
        logger.info(f"Debug mode: {config.DEBUG}")

        # threaded=True serves every connection on its own thread
        app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG, threaded=True)

    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")
    except OSError as e:
        logger.error(f"Failed to bind {config.HOST}:{config.PORT}: {e}")
        raise SystemExit(1)
    finally:
        logger.info("Dashboard server stopped")
