import os
import sys

from loguru import logger

from app.core.config import LOG_DIR, LOG_LEVEL, LOG_TO_CONSOLE

FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"

# channel name (bound as log_type) -> file
CHANNELS = {
    "booking": "bookings.log",
    "payment": "payments.log",
    "admin": "admin.log",
}

os.makedirs(LOG_DIR, exist_ok=True)

# Remove default handler
logger.remove()


def _only(log_type: str):
    return lambda record: record["extra"].get("log_type") == log_type


# Everything goes to the general log
logger.add(
    f"{LOG_DIR}/app.log",
    rotation="1 week",
    retention="4 weeks",
    level=LOG_LEVEL,
    enqueue=True,
    format=FORMAT,
)

for log_type, filename in CHANNELS.items():
    logger.add(
        f"{LOG_DIR}/{filename}",
        rotation="1 week",
        retention="4 weeks",
        level=LOG_LEVEL,
        enqueue=True,
        filter=_only(log_type),
        format=FORMAT,
    )

# Payments that were taken but not applied show up here too
logger.add(
    f"{LOG_DIR}/errors.log",
    rotation="1 week",
    retention="8 weeks",
    level="ERROR",
    enqueue=True,
    backtrace=True,
)

if LOG_TO_CONSOLE:
    logger.add(sys.stderr, level=LOG_LEVEL, format=FORMAT)


def get_logger(log_type: str | None = None):
    if log_type:
        return logger.bind(log_type=log_type)
    return logger
