"""
Run the SRE HTTP bridge.

Settings come from .env / environment (VKSR_HOST, VKSR_PORT,
VKSR_CONFIG_PATH, VKSR_UPSTREAM, VKSR_LOG_LEVEL, ...).

Usage:
  python tools/sound_bridge_server.py
  python tools/sound_bridge_server.py --port 8080 --upstream http://localhost:3000
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from SRE.SBM.server import create_app
from SRE.SCM.settings import ReplacerSettings, configure_logging

logger = logging.getLogger("sound_bridge_server")


def main(argv=None) -> None:
    settings = ReplacerSettings.load()

    parser = argparse.ArgumentParser(description="Serve replacement sounds over HTTP.")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--config", default=settings.config_path,
                        help="configuration JSON file")
    parser.add_argument("--upstream", default=settings.upstream,
                        help="where to redirect sounds that have no replacement")
    args = parser.parse_args(argv)

    settings.host = args.host
    settings.port = args.port
    settings.config_path = args.config
    settings.upstream = args.upstream.rstrip("/")

    configure_logging(settings.log_level)
    logger.info(f"Serving on http://{settings.host}:{settings.port} "
                f"(config: {settings.config_path})")

    app = create_app(settings=settings)
    app.run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
