"""Application entry point for Tracepoint backend server."""

from tracepoint.app import App
from tracepoint.config import Config
from tracepoint.logging import setup_logging
from tracepoint.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    run_server(App(config), config)


if __name__ == "__main__":
    main()
