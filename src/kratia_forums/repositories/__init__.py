"""Query helpers for governance documents."""

from .votation_repo import VotationRepository

__all__ = ["VotationRepository"]
