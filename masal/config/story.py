"""
Story generation constants for the Masal Makinesi API.

Limits shared by request validation, the retry orchestrator and the
story quota.
"""

# Story generation constants
STORY_CONSTANTS = {
    "min_age": 3,
    "max_age": 18,
    "max_generation_attempts": 2,  # first attempt plus one retry
    "daily_story_limit": 10,  # stories per user per rolling window
    "quota_window_hours": 24,
    "default_safety_score": 0.8,  # used when the model reports no ratings
}

# Numeric score for each model-reported harm probability
SAFETY_PROBABILITY_SCORES = {
    "negligible": 1.0,
    "low": 0.9,
    "medium": 0.6,
    "high": 0.2,
}
