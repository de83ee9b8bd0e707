[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shopflow"
version = "0.1.0"
description = "Building blocks for order and payment services: an HTTP gateway, JSON routing, transactional storage and RabbitMQ messaging"
requires-python = ">=3.10"
keywords = [
    "microservices",
    "gateway",
    "reverse-proxy",
    "outbox",
    "rabbitmq",
    "wsgi",
    "orders",
    "payments",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Internet :: Proxy Servers",
]
dependencies = [
    "werkzeug>=3.0",
    "requests>=2.31",
    "pyyaml>=6.0",
    "sqlalchemy>=2.0",
    "pika>=1.3",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.24",
]

[project.scripts]
shopflow-gateway = "shopflow.gateway.main:main"

[tool.hatch.build.targets.wheel]
packages = ["shopflow"]

[tool.pytest.ini_options]
addopts = "-ra"
