"""Kratia Forums: a forum platform governed by binding community votations."""

__version__ = "0.1.0"
