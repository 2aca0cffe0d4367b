"""Core building blocks shared by every orbis-access feature."""
