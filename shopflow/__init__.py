"""Order and payment service components with an HTTP gateway and RabbitMQ messaging."""

__version__ = "0.1.0"