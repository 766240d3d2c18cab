"""Helpers that do not depend on the core engine."""

from .convert_utils import ConvertUtils

__all__ = ["ConvertUtils"]
