[build-system]
requires = ["setuptools>=68", "wheel"]
build-backend = "setuptools.build_meta"

[project]
name = "chainboard"
version = "0.1.0"
description = "Building blocks of a chain-replicated message board node: entities, in-memory relations, replay buffers, node state machine and handshake"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "chain replication",
    "message board",
    "replication",
    "in-memory database",
    "state machine",
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
    "Topic :: Communications :: Conferencing",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["chainboard*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
