"""
Mood Recommendation Service
===========================

Pipeline cho một request:
mood -> LLM prompt -> parse/repair -> TMDB enrichment (song song) -> response

Không giữ state giữa các request.
"""

import asyncio
import logging
from typing import Dict, Optional

from watchly.integrations.llm_client import LLMClient, LLMError, get_llm_client
from watchly.integrations.tmdb_client import TMDBClient, get_tmdb_client
from watchly.recommender.errors import LLMNotConfiguredError, MoodRequiredError, UpstreamLLMError
from watchly.recommender.mood_parser import parse_recommendations
from watchly.web.schemas.recommendation import MoodRecommendationResponse, RecommendationRecord

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a movie recommendation expert. Based on the user's mood, recommend exactly 3 movies "
    "or TV shows. Respond ONLY with a valid JSON array containing objects with \"title\" and "
    "\"explanation\" fields. Do not include any markdown formatting or code blocks. The explanation "
    "should be 1-2 sentences about why this matches their mood. Example format: "
    "[{\"title\": \"Movie Name\", \"explanation\": \"Brief explanation here\"}]"
)


def build_user_prompt(mood: str) -> str:
    return f"I'm feeling {mood}. What 3 movies or shows would you recommend?"


class MoodRecommendationService:
    """
    Service sinh recommendations theo mood.

    Args:
        llm_client: None nếu OPENAI_API_KEY chưa được cấu hình
        tmdb_client: client dùng để gắn poster/metadata
    """

    def __init__(self, llm_client: Optional[LLMClient], tmdb_client: TMDBClient):
        self.llm_client = llm_client
        self.tmdb_client = tmdb_client

    async def recommend(self, mood: Optional[str]) -> MoodRecommendationResponse:
        """
        Raises:
            MoodRequiredError: mood thiếu hoặc rỗng (400)
            LLMNotConfiguredError: thiếu API key (500)
            UpstreamLLMError: LLM call thất bại (500)
        """
        if mood is None or not mood.strip():
            raise MoodRequiredError()
        mood = mood.strip()
        logger.info(f"Received mood: {mood!r}")

        if self.llm_client is None:
            logger.error("OpenAI API key not found")
            raise LLMNotConfiguredError()

        try:
            content = await self.llm_client.complete(SYSTEM_PROMPT, build_user_prompt(mood))
        except LLMError as e:
            raise UpstreamLLMError(str(e)) from e
        logger.debug(f"LLM response: {content!r}")

        records, degraded = parse_recommendations(content)
        if degraded:
            logger.warning(f"Returning degraded recommendations for mood {mood!r}")

        enriched = await asyncio.gather(*(self.enrich(record) for record in records))

        logger.info(f"Final recommendations: {[rec.title for rec in enriched]}")
        return MoodRecommendationResponse(recommendations=list(enriched), degraded=degraded)

    async def enrich(self, record: Dict[str, str]) -> RecommendationRecord:
        """
        Gắn poster_url, tmdb_id, release_year, overview từ kết quả TMDB đầu tiên.
        Lookup lỗi hoặc không có kết quả -> trả về record không enrichment.
        """
        base = RecommendationRecord(title=record["title"], explanation=record["explanation"])

        try:
            results = await self.tmdb_client.search_movies(record["title"])
        except Exception as e:
            logger.error(f"TMDB API error for {record['title']!r}: {e}")
            return base

        if not results:
            logger.info(f"No TMDB match for {record['title']!r}")
            return base

        movie = results[0]
        return base.model_copy(update={
            "poster_url": self.tmdb_client.image_url(movie.poster_path),
            "tmdb_id": movie.id,
            "release_year": movie.release_year,
            "overview": movie.overview,
        })


def get_mood_recommendation_service() -> MoodRecommendationService:
    """FastAPI dependency."""
    return MoodRecommendationService(
        llm_client=get_llm_client(),
        tmdb_client=get_tmdb_client()
    )
