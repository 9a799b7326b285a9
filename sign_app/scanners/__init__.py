"""Scanners module for locating application bundles."""

from .apps import find_user_installed_applications, list_app_bundles, resolve_app_by_name

__all__ = ["find_user_installed_applications", "list_app_bundles", "resolve_app_by_name"]
