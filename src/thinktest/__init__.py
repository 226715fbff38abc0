"""ThinkTest — static analysis of WordPress plugin source for test generation."""

__version__ = "0.1.0"
