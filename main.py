import logging
import argparse

# ============================================================
# LOGGING SETUP
# ============================================================
# Configured before server.app is imported so its module-level config load
# logs with this format. Each module uses logging.getLogger(__name__).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    """
    Example usage:
        python main.py 8080
        python main.py 8080 -mode average -window 6

    The port is required. Anything else not given stays as whatever is in
    puppet_config.json (or the dataclass default if no config file exists).
    """
    parser = argparse.ArgumentParser(description='VPupper puppet data relay server')
    parser.add_argument('port',    type=int, help='Port for the Flask web server')
    parser.add_argument('-host',   type=str, help='Interface to bind (default 0.0.0.0)')
    parser.add_argument('-mode',   type=str, choices=['latest', 'average'],
                        help='latest: serve newest frame; average: serve windowed mean')
    parser.add_argument('-window', type=int, help='Frames averaged in average mode')
    parser.add_argument('-config', type=str, help='Config file to load instead of puppet_config.json')
    return parser.parse_args()


if __name__ == "__main__":
    # ============================================================
    # STARTUP SEQUENCE
    #   1. Parse args (argparse exits if the port is missing)
    #   2. Import the app, which loads config from disk and seeds the engine
    #   3. Apply args on top of config
    #   4. Validate
    #   5. Start Flask (blocks until Ctrl+C or crash)
    # ============================================================
    args = parse_args()

    import puppet.config
    if args.config is not None:
        puppet.config.CONFIG_FILE = args.config

    from server.app import app, config

    if args.host is not None:
        config.server.host = args.host
    if args.mode is not None:
        config.smoothing.mode = args.mode
    if args.window is not None:
        config.smoothing.window_size = args.window
    config.server.port = args.port

    errors = config.validate()
    if args.port < 1:
        errors.append(f"Invalid port: {args.port}")
    if errors:
        for error in errors:
            logger.error(error)
        exit(1)

    logging.getLogger().setLevel(config.logging.level.upper())

    HOST = config.server.host
    PORT = config.server.port
    logger.info(f"VPupper server running on http://{HOST}:{PORT} "
                f"(mode={config.smoothing.mode}, window={config.smoothing.window_size})")

    try:
        app.run(host=HOST, port=PORT, threaded=True)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
    except Exception as e:
        logger.error(f"Server error: {e}")
        exit(1)
