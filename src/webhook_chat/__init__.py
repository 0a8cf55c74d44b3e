"""Single-session conversational client for a remote webhook endpoint."""

__version__ = "0.1.0"
