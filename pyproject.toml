[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cachedirective"
version = "0.1.0"
description = "Parse and merge HTTP cache middleware configuration written as nested directive blocks."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "http",
    "cache",
    "configuration",
    "directive",
    "middleware",
    "duration",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cachedirective"]

[tool.hatch.build.targets.sdist]
include = ["cachedirective", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
