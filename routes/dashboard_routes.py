from flask import Blueprint, Response
from services.telemetry_reader_service import get_latest_record
from services.dashboard_service import render_dashboard, render_no_data
import config
import logging

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)

ALL_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']


def no_data_response() -> Response:
    return Response(render_no_data(), status=200, mimetype='text/plain')


def dashboard_response() -> Response:
    """Dashboard page for the latest record, or the plain text notice when there is none"""
    try:
        record = get_latest_record(config.TELEMETRY_FILE, config.READ_CHUNK_SIZE)
        if record is None:
            logger.debug(f"No telemetry record in {config.TELEMETRY_FILE}")
            return no_data_response()

        return Response(render_dashboard(record), status=200, mimetype='text/html')

    except Exception:
        logger.exception("Failed to render dashboard")
        return no_data_response()


@dashboard_bp.route('/', defaults={'path': ''}, methods=ALL_METHODS)
@dashboard_bp.route('/<path:path>', methods=ALL_METHODS)
def dashboard(path):
    """
    Render the latest telemetry record as an HTML dashboard.

    Every path is served the same page. Methods missing from ALL_METHODS end
    up in the 405 handler registered by create_app, which serves it as well.
    """
    return dashboard_response()
