"""LearnPlatform: catalog, commerce and learning-activity API."""

__version__ = "0.1"
