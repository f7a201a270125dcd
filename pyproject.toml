[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rollappstate"
version = "0.1.0"
description = "In-memory ledger module that registers rollapps, records their state updates and answers queries about them"
requires-python = ">=3.10"
dependencies = []
keywords = ["rollapp", "state", "ledger", "keeper", "bech32", "blockchain"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rollappstate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
