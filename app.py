import logging
import os
import sys
from pathlib import Path

from sc_serve.config.io import load_global_config, load_session
from sc_serve.core.exceptions import ScServeError
from sc_serve.logging_config import configure_logging
from sc_serve.server.app import find_free_port, serve

configure_logging()
logger = logging.getLogger("sc_serve.app")


def main() -> int:
    config_root = Path(os.getenv("SC_SERVE_CONFIG", "config"))
    debug = os.getenv("DEBUG", "0") == "1"

    try:
        global_config = load_global_config(config_root)

        # 1. Preferred port from env, else global.json
        preferred_port = int(os.getenv("PORT", str(global_config.port)))

        # 2. URLs embed the port, so settle it before building routes
        final_port = find_free_port(preferred_port)
        if final_port != preferred_port:
            logger.warning(
                "Preferred port taken; using next free port",
                extra={"preferred_port": preferred_port, "port": final_port},
            )

        session = load_session(config_root, global_config=global_config)
        session.setup(final_port)
    except (ScServeError, FileNotFoundError, ValueError) as e:
        logger.error("Serving startup aborted", extra={"error": str(e)})
        return 1

    serve(session, debug=debug)
    return 0


if __name__ == "__main__":
    sys.exit(main())
