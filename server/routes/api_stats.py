import logging
import psutil
from flask import Blueprint, jsonify

from server.app import state, engine

logger = logging.getLogger(__name__)
bp = Blueprint('api_stats', __name__)

_process = psutil.Process()


def _process_stats():
    """CPU and memory of this server process. A failed read is reported as None."""
    stats = {"cpu_percent": None, "memory_mb": None}
    try:
        # interval=None: usage since the previous call, returns immediately.
        stats["cpu_percent"] = _process.cpu_percent(interval=None)
        stats["memory_mb"] = round(_process.memory_info().rss / (1024 * 1024), 1)
    except psutil.Error as e:
        logger.warning(f"Process stats unavailable: {e}")
    return stats


@bp.route("/api/stats")
def get_stats():
    """Ingest and window stats. Polled by the dashboard."""
    with state.lock:
        rate = engine.ingest_rate.value
        stats = {
            "frames_received": engine.frames_received,
            "ingest_hz": round(rate, 1) if rate is not None else None,
            "mode": engine.cfg.mode,
            "window": {
                "size": len(engine.store),
                "capacity": engine.store.capacity,
                "seeded": engine.store.seeded,
            },
        }
    stats["process"] = _process_stats()
    return jsonify(stats)
