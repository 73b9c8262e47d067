"""
Study Module for exam preparation.

Provides services for:
- Mastery level classification and adaptive level tracking
- Spaced repetition revision scheduling
- Burnout detection from daily energy logs
- Weekly study plan allocation
"""

from prep_engine.study.level_tracker import AdaptiveLevelTracker
from prep_engine.study.plan_allocator import (
    AdaptiveTarget,
    AllocationResult,
    Motivation,
    RankPrediction,
    SWOTAnalysis,
    adaptive_target,
    allocate,
    categorize_topics,
    motivation,
    predict_rank,
    time_allocation,
)
from prep_engine.study.spaced_repetition import SpacedRepetitionScheduler
from prep_engine.study.study_service import StudyPlan, StudyPlanService

__all__ = [
    "AdaptiveLevelTracker",
    "SpacedRepetitionScheduler",
    "StudyPlanService",
    "StudyPlan",
    "AllocationResult",
    "SWOTAnalysis",
    "AdaptiveTarget",
    "RankPrediction",
    "Motivation",
    "adaptive_target",
    "allocate",
    "categorize_topics",
    "motivation",
    "predict_rank",
    "time_allocation",
]
