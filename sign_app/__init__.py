"""Sign user-installed macOS applications with an ad-hoc signature."""

__version__ = "0.1.0"
