[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "researchapi"
version = "0.1.0"
description = "Token-protected JSON API layer for a research monitor: sources, arXiv fetches, a paper catalogue and document extractions."
requires-python = ">=3.10"
keywords = ["arxiv", "papers", "research", "http", "api", "starlette", "asgi", "extraction"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "starlette",
]

[project.optional-dependencies]
test = [
    "pytest",
    "httpx",
]

[tool.hatch.build.targets.wheel]
packages = ["researchapi"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
