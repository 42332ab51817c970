"""Utility functions and classes for mirrorql."""

from mirrorql.utils import logging

__all__ = ("logging",)
