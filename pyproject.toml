[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "haclog"
version = "0.1.0"
description = "Deferred printf-style logging: capture format arguments as compact records, format them later and write them through console and file handlers"
requires-python = ">=3.10"
dependencies = []
keywords = ["logging", "printf", "log rotation", "handler", "serialization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["haclog"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
