[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gorder"
version = "0.1.0"
description = "Order, stock, payment and kitchen services for a small ordering system"
requires-python = ">=3.10"
keywords = ["orders", "stock", "payment", "cqrs", "message-broker"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gorder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
