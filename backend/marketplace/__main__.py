import logging

import uvicorn

from marketplace.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
uvicorn.run(
    "marketplace.main:app",
    host=settings.host,
    port=settings.port,
    log_level=settings.log_level.lower(),
)
