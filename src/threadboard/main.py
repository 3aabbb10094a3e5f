"""Application entry point for Threadboard backend server."""

from threadboard.app import App
from threadboard.config import Config
from threadboard.logging import setup_logging
from threadboard.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
