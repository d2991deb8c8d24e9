"""Blog backend building blocks: configuration, models, captchas, responses, database and search tools."""

__version__ = "0.1.0"