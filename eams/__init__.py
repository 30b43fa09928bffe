"""EAMS: employee absence management (gateway, auth service, absence service)."""

__version__ = "0.1.0"
