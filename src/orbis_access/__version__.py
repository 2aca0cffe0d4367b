"""Version information for orbis-access."""

__version__ = "1.0.0"
