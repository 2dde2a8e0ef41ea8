"""flashdeck: spaced-repetition scheduling and due-card retrieval over nested decks."""

VERSION = "0.1.0"
__version__ = VERSION
