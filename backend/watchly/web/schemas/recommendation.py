"""
Schemas cho mood recommendation endpoint.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class MoodRequest(BaseModel):
    """
    Request body `{"mood": "..."}`.

    `mood` được để optional ở schema để service trả về lỗi 400
    `{"error": "Mood is required"}` thay vì lỗi validation 422.
    """
    mood: Optional[str] = Field(None, description="Free-text mood, e.g. 'cozy'")


class RecommendationRecord(BaseModel):
    title: str
    explanation: str
    poster_url: Optional[str] = None
    tmdb_id: Optional[int] = None
    release_year: Optional[int] = None
    overview: Optional[str] = None


class MoodRecommendationResponse(BaseModel):
    recommendations: List[RecommendationRecord]
    degraded: bool = Field(
        False,
        description="True nếu model output không dùng được và đã thay bằng fallback list"
    )


class RecommendationErrorResponse(BaseModel):
    error: str
