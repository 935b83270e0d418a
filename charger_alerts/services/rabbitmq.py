import json
import logging

import aio_pika
from tenacity import retry, stop_after_attempt, wait_exponential

from ..config import settings
from ..core.settings import USAGE_EXCHANGE

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    reraise=True
)
async def connect_to_rabbitmq():
    """Connect to RabbitMQ with retry logic"""
    logger.info(f"Attempting to connect to RabbitMQ at {settings.RABBITMQ_URL}")
    return await aio_pika.connect_robust(settings.RABBITMQ_URL)


async def publish_event(event_type: str, payload: dict, exchange_name: str = USAGE_EXCHANGE):
    connection = await connect_to_rabbitmq()
    try:
        channel = await connection.channel()

        exchange = await channel.declare_exchange(
            exchange_name,
            aio_pika.ExchangeType.DIRECT,
            durable=True
        )

        message = aio_pika.Message(
            body=json.dumps(payload).encode(),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT
        )

        await exchange.publish(
            message,
            routing_key=event_type
        )
        logger.info(f"Published {event_type} event")
    finally:
        await connection.close()
