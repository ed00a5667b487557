"""Route handlers for Web API."""

from writequest.web.routes.daily_challenge import router as daily_challenge_router
from writequest.web.routes.daily_challenge import streak_router
from writequest.web.routes.exercises import router as exercises_router
from writequest.web.routes.guardians import parent_router, teacher_router
from writequest.web.routes.health import router as health_router
from writequest.web.routes.progress import achievements_router
from writequest.web.routes.progress import router as progress_router
from writequest.web.routes.quests import router as quests_router
from writequest.web.routes.users import auth_router, user_router
from writequest.web.routes.writing import router as writing_router

__all__ = [
    "achievements_router",
    "auth_router",
    "daily_challenge_router",
    "exercises_router",
    "health_router",
    "parent_router",
    "progress_router",
    "quests_router",
    "streak_router",
    "teacher_router",
    "user_router",
    "writing_router",
]
