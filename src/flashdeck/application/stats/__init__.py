# Application Stats Package
from .metrics_calculator import MetricsCalculator
from .service import StudyStatsService

__all__ = ["MetricsCalculator", "StudyStatsService"]
