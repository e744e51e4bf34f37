"""ZETA - Linear status-ticket assistant."""

__version__ = "0.1.0"
