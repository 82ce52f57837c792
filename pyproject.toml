[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mycelium"
version = "0.1.0"
description = "Route metrics, packet codecs and message wire formats for an encrypted IPv6 overlay network"
requires-python = ">=3.10"
dependencies = []
keywords = ["overlay", "mesh", "ipv6", "metric", "messaging", "networking", "blake3"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["mycelium"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
