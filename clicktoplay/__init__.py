"""Click-to-play plugin activation tracker."""

__version__ = "0.1.0"
