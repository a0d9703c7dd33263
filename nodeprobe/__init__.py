"""Node health helpers: OS facts, log start times, metrics, kernel stats and process control."""

__version__ = "0.1.0"