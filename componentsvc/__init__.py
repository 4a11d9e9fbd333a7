"""WSGI service for hierarchical components stored in SQLite with an in-memory cache."""

__version__ = "0.1.0"

__all__ = ["__version__"]