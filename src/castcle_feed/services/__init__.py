"""Business logic services for the Castcle feed."""

from .candidates import CandidatePipeline, CandidateRequest
from .engagement import EngagementService
from .personalization import PersonalizationClient, PersonalizationError
from .ranker import RankerService
from .user_service import UserService

__all__ = [
    "CandidatePipeline",
    "CandidateRequest",
    "EngagementService",
    "PersonalizationClient",
    "PersonalizationError",
    "RankerService",
    "UserService",
]
