import asyncio

import structlog

from nftmarket.app import MarketNode
from nftmarket.core.config import settings
from nftmarket.core.logging import Logger
from nftmarket.core.logging import configure as configure_logging

configure_logging()

logger: Logger = structlog.get_logger()


async def main():
    logger.info(f"Starting marketplace node ({settings.ENV})...")
    node = MarketNode(
        enable_http=True,
        http_host=settings.HTTP_HOST,
        http_port=settings.HTTP_PORT,
    )

    await node.run()

    await logger.ainfo("Marketplace node finished")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
