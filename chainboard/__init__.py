"""Building blocks of a chain-replicated message board node."""

__version__ = "0.1.0"