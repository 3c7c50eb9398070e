"""Live Academy Finder: keyword search over YouTube caption segments."""

__version__ = "0.1.0"
