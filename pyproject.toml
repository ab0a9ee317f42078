[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pipestream"
version = "0.1.0"
description = "Byte streams over queues, pipes and sockets sharing one read/write interface"
requires-python = ">=3.10"
dependencies = []
keywords = ["stream", "pipe", "socket", "queue", "subprocess", "encoding"]
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
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pipestream"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
