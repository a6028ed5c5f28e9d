"""Application services."""

from .committee_review import (
    CommitteeReviewer,
    build_committee_decision_pack,
    build_committee_view,
    score_bank_snapshot,
)
from .credit_review import CreditReviewer, review_credit_dossier
from .market_study import MarketStudyScorer, score_market_study

__all__ = [
    "CommitteeReviewer",
    "CreditReviewer",
    "MarketStudyScorer",
    "build_committee_decision_pack",
    "build_committee_view",
    "review_credit_dossier",
    "score_bank_snapshot",
    "score_market_study",
]
