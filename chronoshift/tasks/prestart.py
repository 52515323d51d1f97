"""Prepare the database before the app starts."""
from __future__ import annotations

import asyncio
import logging

from chronoshift.config.settings import get_settings
from chronoshift.data.database import init_db
from chronoshift.utils.logging import setup_logging


async def _prepare() -> None:
    settings = get_settings()
    await init_db()
    logging.getLogger("chronoshift.prestart").info("Database initialised at %s", settings.database_url)


def main() -> None:
    setup_logging()
    asyncio.run(_prepare())


if __name__ == "__main__":
    main()
