import asyncio
import functools
import json
import logging
from typing import Optional

import aio_pika
from pydantic import ValidationError

from ..config import settings
from ..core.settings import USAGE_CREATED_ROUTING_KEY, USAGE_EXCHANGE, USAGE_QUEUE
from ..pipeline import ChargerAlertPipeline, PipelineResult, PipelineServices
from ..schemas.usage_report import UsageReport
from ..services.firebase import FirebaseNotificationService
from ..services.notifications import ChargerAlertDispatcher
from ..services.plate_recognizer import PlateRecognizerClient
from ..services.rabbitmq import connect_to_rabbitmq
from ..services.registry import PostgresRegistry
from ..services.storage import AddressResolver, StorageClient
from ..utils.postgres import PostgresDB
from ..utils.sentry import init_sentry_from_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_pipeline() -> ChargerAlertPipeline:
    services = PipelineServices(
        resolver=AddressResolver(StorageClient()),
        detector=PlateRecognizerClient(),
        registry=PostgresRegistry(),
        dispatcher=ChargerAlertDispatcher(FirebaseNotificationService())
    )
    return ChargerAlertPipeline(services)


def decode_report(body: bytes) -> Optional[UsageReport]:
    """UsageReport from a message body, None when the body is not a usable report"""
    try:
        data = json.loads(body.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Could not decode message body: {str(e)}")
        return None

    if not isinstance(data, dict) or not data:
        logger.error(f"Unexpected message payload: {data}")
        return None

    try:
        return UsageReport.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid usage report payload: {str(e)}")
        return None


async def handle_report(body: bytes, pipeline: ChargerAlertPipeline) -> PipelineResult:
    report = decode_report(body)
    logger.info(f"Processing message: {report}")
    result = await pipeline.run(report)
    logger.info(f"Usage report finished with outcome {result.outcome.value}, intents: {result.intents}")
    return result


async def process_message(message: aio_pika.abc.AbstractIncomingMessage, pipeline: ChargerAlertPipeline):
    # Ack after the run completes; an exception rejects the message
    async with message.process():
        try:
            await handle_report(message.body, pipeline)
        except Exception as e:
            logger.error(f"Error processing message {message.message_id}: {str(e)}")
            raise


async def main():
    init_sentry_from_settings()
    await PostgresDB.initialize_pool()
    pipeline = build_pipeline()

    # Connect to RabbitMQ with retry
    connection = await connect_to_rabbitmq()
    channel = await connection.channel()
    await channel.set_qos(prefetch_count=settings.WORKER_PREFETCH_COUNT)

    # Declare exchange and queue
    exchange = await channel.declare_exchange(USAGE_EXCHANGE, aio_pika.ExchangeType.DIRECT, durable=True)
    queue = await channel.declare_queue(USAGE_QUEUE, durable=True)

    # Bind queue to exchange
    await queue.bind(exchange, routing_key=USAGE_CREATED_ROUTING_KEY)

    # Start consuming messages
    logger.info("Usage report worker started")
    await queue.consume(functools.partial(process_message, pipeline=pipeline))

    try:
        await asyncio.Future()  # wait forever
    finally:
        await connection.close()
        await PostgresDB.close_pool()


if __name__ == "__main__":
    asyncio.run(main())
