"""evaldesk - job tracking, comparison and leaderboards for LLM evaluations."""

__version__ = "0.1.0"
