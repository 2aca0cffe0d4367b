"""Feature modules for orbis-access."""
