"""Uvicorn server runner with custom configuration."""

import copy

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from tracepoint.app import App
from tracepoint.config import Config
from tracepoint.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server.

    Proxy headers are trusted only from `forwarded_allow_ips`, since the login
    rate limit is keyed by client address.
    """
    fastapi_app = create_fastapi_app(app, config)

    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    logger.info("server_starting", host=config.host, port=config.port, environment=config.environment)
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=log_config,
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips=config.forwarded_allow_ips,
    )
