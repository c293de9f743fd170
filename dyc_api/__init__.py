"""DYC referidos backend: politicians, their supporters and the admin panel."""

__version__ = "1.0.0"
