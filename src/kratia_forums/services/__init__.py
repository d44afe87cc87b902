# src/kratia_forums/services/__init__.py
"""Governance services: eligibility, vote tally, closure and proposal issuance."""

from .closure import close_due_votations, ensure_closed
from .ledger import AtomicStore
from .notifications import NotificationDispatcher
from .proposals import (
    IssuedProposal,
    propose_admission,
    propose_new_forum,
    propose_rule_change,
    propose_sanction,
)
from .tally import Tally, cast_vote, get_my_vote

__all__ = [
    "AtomicStore",
    "NotificationDispatcher",
    "ensure_closed",
    "close_due_votations",
    "IssuedProposal",
    "propose_sanction",
    "propose_rule_change",
    "propose_new_forum",
    "propose_admission",
    "Tally",
    "cast_vote",
    "get_my_vote",
]
