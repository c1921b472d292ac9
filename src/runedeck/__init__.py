"""runedeck: spaced-repetition scheduling and study queues for vocabulary decks."""

__version__ = "0.1.0"
