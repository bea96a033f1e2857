# ================== LOGURU LOGGER CONFIG =====================
import sys
import os
from loguru import logger

LOG_DIR = os.environ.get("LOG_DIR") or "logs"

log_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>order:{extra[order_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, colorize=True, format=log_format, level="INFO")
if os.environ.get("FLASK_CONFIG") != "testing":
    os.makedirs(LOG_DIR, exist_ok=True)
    logger.add(
        os.path.join(LOG_DIR, "orderhub_service.json"),
        rotation="100 MB",
        retention="10 days",
        compression="zip",
        serialize=True,
        level="DEBUG",
        enqueue=True,
        catch=True,
    )
configured_logger = logger.patch(
    lambda record: record["extra"].setdefault("order_id", "NO_ORDER")
)


# ================== TOPIC LOGGERS =====================
def log_order_message(message, order_id=None):
    configured_logger.bind(topic="order", order_id=order_id or "NO_ORDER").info(message)


def log_payment_message(message, order_id=None):
    configured_logger.bind(topic="payment", order_id=order_id or "NO_ORDER").info(
        message
    )


def log_refund_message(message, order_id=None):
    configured_logger.bind(topic="refund", order_id=order_id or "NO_ORDER").info(
        message
    )


def log_client_message(message):
    configured_logger.bind(topic="client").debug(message)


# ================== EXPORT LOGGER =====================
log = configured_logger
logger = configured_logger
