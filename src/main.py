"""Entry point for the dust sweeper action server."""

import asyncio

from loguru import logger

from config.settings import settings
from src.api.server import run_action_server
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info(
        f"Starting dust sweeper (threshold ${settings.dust_threshold_usd:g}, "
        f"inclusive={settings.dust_threshold_inclusive}, rpc={settings.solana_rpc_url.split('?')[0]})"
    )
    await run_action_server()
    logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
