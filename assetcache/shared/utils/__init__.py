"""Shared utilities: generators."""

from assetcache.shared.utils.generators import generate_cuid

__all__ = ["generate_cuid"]
