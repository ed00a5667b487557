"""Core business logic.

Modules:
- skills: mastery triple
- achievements: achievement catalogue and unlock evaluation
- exercises: exercise catalogue, map status and grading
- quests: town locations and writing quests
- feedback: AI writing feedback and exercise recommendations
- review_service: submission review pipeline
- progress_service: progress bookkeeping
- streaks: daily writing streaks and history
- daily_challenge: daily challenge generation
- writing_coach: writer's-block help and location prompts
"""

__all__ = [
    "skills",
    "achievements",
    "exercises",
    "quests",
    "feedback",
    "review_service",
    "progress_service",
    "streaks",
    "daily_challenge",
    "writing_coach",
]
