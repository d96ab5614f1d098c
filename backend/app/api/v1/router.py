"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    account,
    analytics,
    curriculum,
    gamification,
    health,
    leaderboard,
    practice_tests,
    tests,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(curriculum.router, prefix="/curriculum", tags=["Curriculum"])
api_router.include_router(tests.router, prefix="/tests", tags=["Tests"])
api_router.include_router(practice_tests.router, prefix="/practice-tests", tags=["Practice Tests"])
api_router.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(account.router, prefix="/account", tags=["Account"])
