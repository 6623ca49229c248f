import json
import os
import logging
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

# Where the config is persisted on disk, relative to the working directory.
# Looked up at call time so tests can point it somewhere else.
CONFIG_FILE = "puppet_config.json"

SMOOTHING_MODES = ("latest", "average")
MERGE_GRANULARITIES = ("section", "leaf")


# ============================================================
# DATACLASSES - one per group of related settings.
# ============================================================

@dataclass
class SmoothingConfig:
    """
    How incoming frames become the served frame.

    mode:            "latest"  - serve the newest merged frame (window of 1).
                     "average" - serve the field-wise mean of the last window_size frames.
    window_size:     Frames averaged in "average" mode.
    blink_threshold: An eye blinks while its openness is strictly below this.
    merge:           "section" - an omitted top-level section is copied from the
                                 previous frame; a supplied section is taken as-is.
                     "leaf"    - every omitted leaf is copied from the previous frame.
    rate_smoothing_factor: alpha of the ingest-rate EMA reported by /api/stats.
    """
    mode: str = "latest"
    window_size: int = 4
    blink_threshold: float = 0.4
    merge: str = "section"
    rate_smoothing_factor: float = 0.2


@dataclass
class ServerConfig:
    """
    Flask bind settings used by main.py. The port always comes from the
    command line; the value here is only what gets reported back.
    """
    host: str = "0.0.0.0"
    port: int = 0


@dataclass
class LoggingConfig:
    """
    level:      Root log level name.
    log_frames: Log every incoming payload and served frame at INFO instead of DEBUG.
    """
    level: str = "INFO"
    log_frames: bool = False


@dataclass
class PuppetConfig:
    """
    Root config object, instantiated once in server/app.py and shared with
    the SmoothingEngine (reads smoothing on every update) and the /api/config
    routes (read and write it under state.config_lock).
    """
    smoothing: SmoothingConfig = None
    server: ServerConfig = None
    logging: LoggingConfig = None

    def __post_init__(self):
        if self.smoothing is None: self.smoothing = SmoothingConfig()
        if self.server is None: self.server = ServerConfig()
        if self.logging is None: self.logging = LoggingConfig()

    def _sections(self):
        return {
            "smoothing": self.smoothing,
            "server": self.server,
            "logging": self.logging,
        }

    def to_dict(self):
        return {name: asdict(section) for name, section in self._sections().items()}

    def from_dict(self, data):
        """
        Copy values from a plain dict into this config in-place.
        Unknown sections and keys are ignored so an outdated config file
        doesn't stop the server from starting.
        """
        try:
            for section_name, section_obj in self._sections().items():
                if section_name in data:
                    for key, value in data[section_name].items():
                        if hasattr(section_obj, key):
                            setattr(section_obj, key, value)
        except Exception as e:
            logger.error(f"Error loading config from dict: {e}")

    def validate(self):
        """Return a list of human-readable problems. Empty means valid."""
        errors = []
        s = self.smoothing
        if s.mode not in SMOOTHING_MODES:
            errors.append(f"smoothing.mode must be one of {SMOOTHING_MODES}, got {s.mode!r}")
        if s.merge not in MERGE_GRANULARITIES:
            errors.append(f"smoothing.merge must be one of {MERGE_GRANULARITIES}, got {s.merge!r}")
        if not isinstance(s.window_size, int) or s.window_size < 1:
            errors.append(f"smoothing.window_size must be a positive integer, got {s.window_size!r}")
        if not 0.0 <= s.rate_smoothing_factor <= 1.0:
            errors.append(f"smoothing.rate_smoothing_factor must be in [0, 1], got {s.rate_smoothing_factor}")
        if not 0 <= self.server.port <= 65535:
            errors.append(f"server.port out of range: {self.server.port}")
        if not isinstance(logging.getLevelName(str(self.logging.level).upper()), int):
            errors.append(f"logging.level is not a log level: {self.logging.level!r}")
        return errors

    def save(self, filepath=None):
        """Write the config to JSON. Returns True on success."""
        filepath = filepath or CONFIG_FILE
        try:
            with open(filepath, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.info(f"Configuration saved to {filepath}")
            return True
        except Exception as e:
            logger.error(f"Error saving config to {filepath}: {e}")
            return False

    def load(self, filepath=None):
        """
        Load config from JSON if the file exists.
        A missing file is normal on first run; defaults are kept.
        """
        filepath = filepath or CONFIG_FILE
        if not os.path.exists(filepath):
            logger.info(f"No config file found at {filepath}, using defaults")
            return False
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
            self.from_dict(data)
            logger.info(f"Configuration loaded from {filepath}")
            return True
        except Exception as e:
            logger.error(f"Error loading config from {filepath}: {e}")
            return False
