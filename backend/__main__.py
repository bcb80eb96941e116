"""Run the counter backend with uvicorn.

    python -m backend

Host and port come from SERVER_HOST / SERVER_PORT (defaults 127.0.0.1:2022).
"""
import os
import logging

import uvicorn

SERVER_HOST_DEFAULT = "127.0.0.1"
SERVER_PORT_DEFAULT = 2022


def main():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    host = os.environ.get("SERVER_HOST", SERVER_HOST_DEFAULT)
    try:
        port = int(os.environ.get("SERVER_PORT", SERVER_PORT_DEFAULT))
    except ValueError:
        logging.getLogger(__name__).warning("Invalid SERVER_PORT, using default")
        port = SERVER_PORT_DEFAULT
    uvicorn.run("backend.api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
