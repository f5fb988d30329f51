"""Reactor-style TCP networking: event loops, timers, thread pools, asynchronous logging and a small HTTP server."""

__version__ = "0.1.0"