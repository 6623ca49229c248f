import logging
from flask import Flask

from server.state import SharedState
from puppet.config import PuppetConfig
from puppet.smoothing import SmoothingEngine

logging.basicConfig(level=logging.INFO)
logging.getLogger('werkzeug').setLevel(logging.ERROR)

# ── Singletons ────────────────────────────────────────────────────────────────
# Created once at import time. Shared by all route modules via import.

app = Flask(__name__, static_folder='static')

state = SharedState()

config = PuppetConfig()
config.load()

# Seeded with the default frame here, before any request can be served.
engine = SmoothingEngine(config.smoothing)

# ── Register route blueprints ─────────────────────────────────────────────────
from server.routes.puppet_data  import bp as puppet_bp   # noqa: E402
from server.routes.api_config   import bp as config_bp   # noqa: E402
from server.routes.api_stats    import bp as stats_bp    # noqa: E402
from server.routes.static_files import bp as static_bp   # noqa: E402

app.register_blueprint(puppet_bp)
app.register_blueprint(config_bp)
app.register_blueprint(stats_bp)
app.register_blueprint(static_bp)
