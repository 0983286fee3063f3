"""Main entry point - runs the API server."""

import asyncio
import logging
import signal

import uvicorn

from uniagent.api.app import create_app
from uniagent.config import get_settings

logger = logging.getLogger(__name__)


class Application:
    """Main application that runs the broker API."""

    def __init__(self):
        self.settings = get_settings()
        self.server = None

    async def start(self):
        """Start the API server and wait for it to exit."""
        # Configure logging
        log_level = logging.DEBUG if self.settings.debug else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        logger.info("Starting UniAgent...")
        logger.info(f"Environment: {self.settings.environment}")
        logger.info(f"API secret: {'ENABLED' if self.settings.auth_enabled else 'DISABLED (set API_SECRET in .env)'}")
        if self.settings.dry_run:
            logger.warning("DRY_RUN enabled - transactions are simulated")

        app = create_app(self.settings)
        config = uvicorn.Config(
            app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level="debug" if self.settings.debug else "info",
        )
        self.server = uvicorn.Server(config)
        logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")
        try:
            await self.server.serve()
        except asyncio.CancelledError:
            logger.info("API server cancelled")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        if self.server:
            self.server.should_exit = True


def main():
    """Main entry point."""
    app = Application()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
