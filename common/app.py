"""Core FastAPI application utilities shared across services."""

import logging
import pathlib
from typing import Any

import fastapi
import fastapi.templating

import common.settings

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class HealthCheckFilter(logging.Filter):
    """Filter out health check requests from uvicorn access logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False to suppress health check log entries."""
        return '/health' not in record.getMessage()


def configure_logging(logger_name: str = 'panchang') -> None:
    """Configure service logging.

    Installs the health check filter on the uvicorn access log and gives the
    named logger hierarchy a stream handler at ``common.settings.LOG_LEVEL``.
    Calling it more than once does not stack handlers.
    """
    access_logger = logging.getLogger('uvicorn.access')
    if not any(isinstance(f, HealthCheckFilter) for f in access_logger.filters):
        access_logger.addFilter(HealthCheckFilter())

    logger = logging.getLogger(logger_name)
    logger.setLevel(common.settings.LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


# ---------------------------------------------------------------------------
# Health router
# ---------------------------------------------------------------------------

_health_router = fastapi.APIRouter()


@_health_router.api_route('/health', methods=['GET', 'HEAD'])
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {'status': 'healthy'}


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def make_templates(
    directory: pathlib.Path | str,
) -> fastapi.templating.Jinja2Templates:
    """Create a Jinja2Templates instance with domain and home_url globals pre-set."""
    templates = fastapi.templating.Jinja2Templates(directory=str(directory))
    templates.env.globals['domain'] = common.settings.DOMAIN  # type: ignore[reportUnknownMemberType]
    templates.env.globals['home_url'] = common.settings.HOME_URL  # type: ignore[reportUnknownMemberType]
    return templates


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(title: str, **kwargs: Any) -> fastapi.FastAPI:
    """Create a FastAPI app with health endpoint and logging configured.

    Additional keyword arguments are forwarded to FastAPI.__init__ (e.g. lifespan).
    """
    app = fastapi.FastAPI(title=title, **kwargs)
    configure_logging()
    app.include_router(_health_router)
    return app
