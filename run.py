"""Entry point for the People API server.

Serves the FastAPI app with Uvicorn and, alongside it, a watchdog that
pings the database every ``DB_PING_INTERVAL`` seconds.  If the
database stops answering, the watchdog fails and the server is shut
down; if the server stops (e.g. on SIGINT/SIGTERM), the watchdog is
cancelled.

Configuration is read from environment variables, see
``people_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from people_api.app.core.config import settings
from people_api.app.main import app
from people_api.app.services.person_service import PersonService

logger = logging.getLogger("people_api.run")


async def watch_database(interval: float) -> None:
    """Ping storage forever; raise ``StorageError`` on the first failure."""
    logger.info("Started to ping database")
    while True:
        await asyncio.sleep(interval)
        await PersonService.ping()


async def main() -> None:
    """Run the server and the database watchdog until either stops."""
    config = Config(app=app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    server = Server(config)
    logger.info("Server starting on %s:%s", settings.host, settings.port)

    server_task = asyncio.create_task(server.serve())
    watchdog_task = asyncio.create_task(watch_database(settings.db_ping_interval))
    done, pending = await asyncio.wait(
        [server_task, watchdog_task], return_when=asyncio.FIRST_COMPLETED
    )
    for task in done:
        if not task.cancelled() and (exception := task.exception()):
            logger.error("Shutting down. Critical error: %s", exception)
    # uvicorn shuts down gracefully on should_exit; only the watchdog is cancelled.
    server.should_exit = True
    watchdog_task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
