[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ecanode"
version = "0.1.0"
description = "Building blocks for the nodes of a distributed Event-Condition-Action engine: rule model, read/write coordination, agents and transaction messages"
requires-python = ">=3.10"
dependencies = []
keywords = ["eca", "rules", "distributed", "transactions", "two-phase-commit", "coordination"]
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
    "Topic :: System :: Distributed Computing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ecanode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
