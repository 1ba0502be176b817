"""
Partner matching: compatibility scoring, candidate search and expert routing.
"""
from .models import MatchProfile, MatchingCriteria, ScoreBreakdown, ScoredCandidate
from .scorer import calculate_compatibility, score_breakdown
from .finder import PartnerFinder
from .experts import ExpertMatcher

__all__ = [
    "MatchProfile",
    "MatchingCriteria",
    "ScoreBreakdown",
    "ScoredCandidate",
    "calculate_compatibility",
    "score_breakdown",
    "PartnerFinder",
    "ExpertMatcher",
]
