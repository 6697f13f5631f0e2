"""BDD UI automation suite for the OrangeHRM web application."""

__version__ = "1.0.0"
