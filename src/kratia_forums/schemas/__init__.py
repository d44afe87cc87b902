# src/kratia_forums/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import Cursor
from .forum import ConstitutionResponse, ForumResponse, PostResponse, ThreadDetail, ThreadResponse
from .notification import NotificationResponse
from .proposal import (
    AdmissionProposal,
    NewForumProposal,
    ProposalCreated,
    RuleChangeProposal,
    SanctionProposal,
)
from .user import MemberResponse
from .votation import (
    AdmissionPayload,
    MyVote,
    NewForumPayload,
    RuleChangePayload,
    SanctionPayload,
    VotationPage,
    VotationResponse,
    VoteCreate,
    VoteResult,
    VoteTally,
)

__all__ = [
    "ConstitutionResponse", "ForumResponse", "PostResponse", "ThreadDetail", "ThreadResponse",
    "NotificationResponse",
    "AdmissionProposal", "NewForumProposal", "ProposalCreated", "RuleChangeProposal",
    "SanctionProposal",
    "Cursor", "MemberResponse",
    "AdmissionPayload", "MyVote", "NewForumPayload", "RuleChangePayload", "SanctionPayload",
    "VotationPage", "VotationResponse", "VoteCreate", "VoteResult", "VoteTally",
]
