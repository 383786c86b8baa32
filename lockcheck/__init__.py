"""lockcheck: audit a fleet of repositories for dependency version compliance."""

__version__ = "0.1.0"
