[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blogserver"
version = "0.1.0"
description = "Building blocks for a personal blog backend: configuration, data models, captchas, response envelopes, MySQL schema tools and an Elasticsearch article index client"
requires-python = ">=3.10"
keywords = ["blog", "captcha", "elasticsearch", "mysql", "sqlalchemy", "configuration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: News/Diary",
]
dependencies = [
    "pyyaml",
    "bcrypt",
    "sqlalchemy",
    "requests",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["blogserver"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
