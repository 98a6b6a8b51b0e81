"""grain: track focused work and mindful breaks with weekly credits."""

__version__ = "0.4.0"
