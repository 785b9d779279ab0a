"""Market dashboard backend: resilient fetch, live store, simulated feed and chart layouts."""

__version__ = "1.0.0"
