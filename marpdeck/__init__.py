"""Generate Marp slide decks from a topic with AI text and images."""

__version__ = "0.1.0"
