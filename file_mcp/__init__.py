"""File tools exposed over the Model Context Protocol with Sentry tracing."""

__version__ = "1.0.0"
