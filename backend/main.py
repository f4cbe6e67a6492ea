"""Backend entrypoint: configure logging and serve the API with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from shared import config


def configure_logging() -> None:
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def run() -> None:
    configure_logging()
    logging.getLogger(__name__).info(
        "server_starting host=%s port=%s app_env=%s", config.api_host(), config.api_port(), config.app_env()
    )
    uvicorn.run("backend.api:app", host=config.api_host(), port=config.api_port())


if __name__ == "__main__":
    run()
