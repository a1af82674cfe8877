[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gleaner"
version = "0.1.0"
description = "Building blocks for web scrapers: CSS and XPath element helpers, rate-limited HTTP backend, request queue, storage and request extensions"
requires-python = ">=3.10"
keywords = ["scraping", "crawler", "html", "xpath", "css-selectors", "queue"]
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
    "Topic :: Internet :: WWW/HTTP :: Indexing/Search",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "beautifulsoup4",
    "lxml",
    "requests",
    "charset-normalizer",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gleaner"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
