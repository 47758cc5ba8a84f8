"""Fleet fuel lifecycle and analytics engine."""

__version__ = "0.9.0"
