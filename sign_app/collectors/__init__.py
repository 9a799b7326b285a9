"""Collectors module wrapping the external macOS tools."""

from .bundle import query_bundle_id
from .codesign import codesign_sign, has_signature, query_authority
from .spotlight import spotlight_applications

__all__ = [
    "query_bundle_id",
    "codesign_sign",
    "has_signature",
    "query_authority",
    "spotlight_applications",
]
