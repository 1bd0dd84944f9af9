"""
Parse và sửa response của LLM thành đúng 3 recommendation records.

Model được yêu cầu trả về JSON array thuần nhưng thường bọc trong
markdown code block, hoặc trả về số lượng khác 3. Module này:

1. Bỏ code fences (```json ... ```)
2. Decode JSON; nếu lỗi hoặc không phải list khác rỗng -> fallback list
3. Chuẩn hóa title/explanation bị thiếu
4. Cắt bớt nếu nhiều hơn 3, bù bằng fallback nếu ít hơn 3
"""

import json
import logging
import re
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

RECOMMENDATION_COUNT = 3

DEFAULT_TITLE = "Unknown Movie"
DEFAULT_EXPLANATION = "A great movie to watch!"

FALLBACK_RECOMMENDATIONS: List[Dict[str, str]] = [
    {"title": "The Shawshank Redemption", "explanation": "A hopeful story that matches your current vibe"},
    {"title": "Spirited Away", "explanation": "A magical adventure to lift your spirits"},
    {"title": "Her", "explanation": "A thoughtful film that resonates with your mood"},
]

_FENCE_OPEN_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```")


def strip_code_fences(content: str) -> str:
    if "```" in content:
        content = _FENCE_OPEN_RE.sub("", content, count=1)
        content = _FENCE_CLOSE_RE.sub("", content)
    return content.strip()


def fallback_recommendations() -> List[Dict[str, str]]:
    return [dict(rec) for rec in FALLBACK_RECOMMENDATIONS]


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def normalize_record(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        raw = {}
    return {
        "title": _text_or_default(raw.get("title"), DEFAULT_TITLE),
        "explanation": _text_or_default(raw.get("explanation"), DEFAULT_EXPLANATION),
    }


def fit_to_count(records: List[Dict[str, str]], count: int = RECOMMENDATION_COUNT) -> Tuple[List[Dict[str, str]], bool]:
    """
    Cắt hoặc bù records cho đủ `count`.

    Returns:
        (records, padded) - padded=True nếu đã phải bù bằng fallback
    """
    fitted = records[:count]
    if len(fitted) == count:
        return fitted, False

    taken = {rec["title"].casefold() for rec in fitted}
    for rec in fallback_recommendations():
        if len(fitted) >= count:
            break
        if rec["title"].casefold() not in taken:
            fitted.append(rec)
            taken.add(rec["title"].casefold())
    return fitted, True


def parse_recommendations(content: str) -> Tuple[List[Dict[str, str]], bool]:
    """
    Parse content từ LLM.

    Returns:
        (records, degraded) - luôn đúng RECOMMENDATION_COUNT records;
        degraded=True nếu đã dùng fallback (toàn bộ hoặc để bù)
    """
    try:
        decoded = json.loads(strip_code_fences(content or ""))
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        logger.error(f"Failed to parse recommendations JSON: {type(e).__name__}: {e}")
        logger.error(f"Raw content: {(content or '')[:500]!r}")
        return fallback_recommendations(), True

    if not isinstance(decoded, list) or len(decoded) == 0:
        logger.error(f"Invalid recommendations format: {type(decoded).__name__}")
        return fallback_recommendations(), True

    if len(decoded) != RECOMMENDATION_COUNT:
        logger.warning(f"Model returned {len(decoded)} recommendations, expected {RECOMMENDATION_COUNT}")

    records = [normalize_record(raw) for raw in decoded]
    return fit_to_count(records)
