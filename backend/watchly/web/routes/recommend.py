"""
Mood recommendation routes
==========================

POST {"mood": "..."} -> 3 recommendations, enriched với poster/metadata từ TMDB.

Lỗi được trả về dạng {"error": "..."} (xem exception handler trong watchly.main).
OPTIONS (CORS preflight) được trả lời bởi middleware trong watchly.main.
"""

from fastapi import APIRouter, Depends

from watchly.recommender.mood_service import MoodRecommendationService, get_mood_recommendation_service
from watchly.web.schemas.recommendation import (
    MoodRecommendationResponse,
    MoodRequest,
    RecommendationErrorResponse,
)

MOOD_RECOMMENDATIONS_PATH = "/api/mood-recommendations"

router = APIRouter(prefix=MOOD_RECOMMENDATIONS_PATH, tags=["recommendations"])


@router.post(
    "",
    response_model=MoodRecommendationResponse,
    response_model_exclude_none=True,
    summary="Get 3 recommendations for a mood",
    responses={
        400: {"model": RecommendationErrorResponse, "description": "Mood is required"},
        500: {"model": RecommendationErrorResponse, "description": "LLM not configured or failed"}
    }
)
async def get_mood_recommendations(
    mood_request: MoodRequest,
    service: MoodRecommendationService = Depends(get_mood_recommendation_service)
):
    """
    Trả về đúng 3 recommendations. Record nào không tìm thấy trên TMDB sẽ
    chỉ có `title` và `explanation`. `degraded=true` khi output của model
    không dùng được và đã thay bằng danh sách mặc định.
    """
    return await service.recommend(mood_request.mood)

