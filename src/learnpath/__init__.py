"""learnpath - LLM-backed learning platform API."""

__version__ = "0.1.0"
