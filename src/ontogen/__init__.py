"""ontogen: random concept graphs for property-based testing."""

__version__ = "0.1.0"
