[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "componentsvc"
version = "0.1.0"
description = "A small WSGI service for storing and browsing hierarchical components, backed by SQLite with an in-memory cache"
requires-python = ">=3.10"
dependencies = []
keywords = ["wsgi", "rest", "components", "hierarchy", "cache", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
componentsvc = "componentsvc.main:main"

[tool.hatch.build.targets.wheel]
packages = ["componentsvc"]

[tool.hatch.build.targets.sdist]
include = ["componentsvc", "tests", "pyproject.toml"]

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
