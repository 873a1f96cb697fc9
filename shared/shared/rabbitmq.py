import logging

import aio_pika

EXCHANGE_NAME = "domain_events"


class RabbitPublisher:
    """
    Topic-exchange publisher. Disabled when no URL is configured.

    Events are notifications only: connect or publish failures are logged and
    never propagated to the command that triggered them.
    """

    def __init__(self, rabbit_url: str | None, logger: logging.Logger, exchange_name: str = EXCHANGE_NAME):
        self.rabbit_url = rabbit_url
        self.enabled = bool(rabbit_url)
        self.exchange_name = exchange_name
        self.logger = logger
        self._connection: aio_pika.RobustConnection | None = None
        self._channel: aio_pika.abc.AbstractChannel | None = None
        self._exchange: aio_pika.abc.AbstractExchange | None = None

    async def connect(self):
        if not self.enabled:
            return

        if self._connection and not self._connection.is_closed:
            return

        try:
            self._connection = await aio_pika.connect_robust(self.rabbit_url)
            self._channel = await self._connection.channel()
            self._exchange = await self._channel.declare_exchange(
                self.exchange_name,
                aio_pika.ExchangeType.TOPIC,
                durable=True,
            )
        except Exception as e:
            self.logger.warning("RabbitMQ connect failed: %s", e)
            self._connection = None
            self._channel = None
            self._exchange = None
            raise

    async def publish(self, routing_key: str, message_body: str):
        if not self.enabled:
            return

        try:
            await self.connect()
        except Exception:
            return

        if not self._exchange:
            return

        try:
            msg = aio_pika.Message(
                body=message_body.encode("utf-8"),
                content_type="application/json",
                delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            )
            await self._exchange.publish(msg, routing_key=routing_key)
        except Exception as e:
            self.logger.warning("RabbitMQ publish failed routing_key=%s: %s", routing_key, e)

    async def close(self):
        try:
            if self._connection and not self._connection.is_closed:
                await self._connection.close()
        finally:
            self._connection = None
            self._channel = None
            self._exchange = None
