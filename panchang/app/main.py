"""FastAPI application for the Panchang calendar."""

import contextlib
import pathlib
from collections.abc import AsyncGenerator

import fastapi
import fastapi.staticfiles

import common.app

from . import reminders, routes
from .client import AlmanacClient

APP_DIR = pathlib.Path(__file__).resolve().parent


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Open the almanac client and the reminders sheet for the app's lifetime."""
    app.state.almanac = AlmanacClient.create()
    app.state.reminder_sheet = reminders.configured_appender()
    try:
        yield
    finally:
        await app.state.almanac.aclose()


app = common.app.create_app('Panchang', lifespan=lifespan)

app.mount(
    '/static',
    fastapi.staticfiles.StaticFiles(directory=APP_DIR / 'static'),
    name='static',
)

app.include_router(routes.router)
