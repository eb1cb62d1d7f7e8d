"""HTTP API converting time, weight, temperature and currency values."""

__version__ = "1.0.0"
