import copy
import logging
from flask import Blueprint, request, jsonify

from server.app import state, config, engine
from puppet.frame import FrameError, FrameUpdate

logger = logging.getLogger(__name__)
bp = Blueprint('puppet_data', __name__)


def _frame_log_level():
    return logging.INFO if config.logging.log_frames else logging.DEBUG


@bp.route("/puppet-data", methods=["POST"])
def post_puppet_data():
    """
    Publish a new (possibly partial) frame. Body: any subset of
    {"face": ..., "bones": ..., "handLeft": ..., "handRight": ...}.
    Missing sections fall back to the previous frame.
    """
    payload = request.get_json(silent=True)
    level = _frame_log_level()
    logger.log(level, f"Updating puppet data. {payload}")

    try:
        update = FrameUpdate.from_payload(payload)
    except FrameError as e:
        logger.warning(f"Rejected puppet data: {e}")
        return jsonify({"error": str(e)}), 400

    try:
        with state.config_lock:
            settings = copy.copy(config.smoothing)
        with state.lock:
            output = engine.update(update, settings)
    except Exception as e:
        logger.error(f"post_puppet_data error: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    if logger.isEnabledFor(level):
        logger.log(level, f"Smoothed data: {output.to_dict()}")
    return jsonify("ok")


@bp.route("/puppet-data", methods=["GET"])
def get_puppet_data():
    """Current output frame. The seeded default frame until the first POST."""
    logger.debug("Fetching smoothed puppet data.")
    with state.lock:
        frame = engine.output
    return jsonify(frame.to_dict())


@bp.route("/api/puppet/reset", methods=["POST"])
def reset_puppet():
    """Drop all received frames and serve the default frame again."""
    with state.lock:
        engine.seed()
    logger.info("Puppet state reset to default frame")
    return jsonify({"status": "ok"})
