import logging
from flask import Blueprint, request, jsonify

from server.app import state, config
from puppet.config import PuppetConfig

logger = logging.getLogger(__name__)
bp = Blueprint('api_config', __name__)


def _set_value(cfg, key_parts, value):
    """
    Walk dot-notation key parts into the config tree and set the value,
    casting to match the existing field's type.
    Returns True on success, False if key doesn't exist or cast fails.
    """
    obj = cfg
    for part in key_parts[:-1]:
        if not hasattr(obj, part):
            return False
        obj = getattr(obj, part)

    attr = key_parts[-1]
    if not hasattr(obj, attr):
        return False

    expected = type(getattr(obj, attr))
    try:
        if expected is bool:
            converted = value if isinstance(value, bool) else str(value).lower() in ("1", "true", "yes", "on")
        elif expected is int:
            converted = int(value)
        elif expected is float:
            converted = float(value)
        elif expected is str:
            converted = str(value)
        else:
            converted = value
        setattr(obj, attr, converted)
        return True
    except (ValueError, TypeError):
        return False


@bp.route("/api/config", methods=["GET"])
def get_config():
    """Full config snapshot."""
    with state.config_lock:
        return jsonify(config.to_dict())


@bp.route("/api/config", methods=["POST"])
def update_config():
    """
    Update one or more config values. Body: {"smoothing.mode": "average", ...}
    Values are applied together and validated; if the result is invalid every
    change in the request is rolled back. Saves to disk after a successful write.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"status": "error", "error": "expected a JSON object"}), 400

    updated, failed = {}, {}

    with state.config_lock:
        before = config.to_dict()
        for key, value in data.items():
            if _set_value(config, key.split("."), value):
                updated[key] = value
            else:
                failed[key] = "invalid key or type"

        errors = config.validate()
        if errors:
            config.from_dict(before)
            for key in updated:
                failed[key] = "; ".join(errors)
            updated = {}
        elif updated:
            config.save()
            logger.info(f"Config updated: {updated}")

    return jsonify({
        "status": "ok" if not failed else "partial",
        "updated": updated,
        "failed": failed,
    })


@bp.route("/api/config/reset", methods=["POST"])
def reset_config():
    """Reset all values to dataclass defaults and save."""
    with state.config_lock:
        port = config.server.port
        config.from_dict(PuppetConfig().to_dict())
        config.server.port = port
        config.save()
    return jsonify({"status": "ok", "message": "Reset to defaults"})
