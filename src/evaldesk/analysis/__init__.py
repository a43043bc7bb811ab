"""Cross-job analysis: comparisons, leaderboards and summaries."""

from evaldesk.analysis.aggregation import AggregationEngine
from evaldesk.analysis.leaderboard import LeaderboardEngine
from evaldesk.analysis.summary import SummaryEngine

__all__ = [
    "AggregationEngine",
    "LeaderboardEngine",
    "SummaryEngine",
]
