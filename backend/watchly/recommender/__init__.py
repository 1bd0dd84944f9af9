"""
Mood recommendation pipeline.

- mood_parser.py: parse/repair LLM output thành đúng 3 records
- mood_service.py: LLM call + TMDB enrichment, dùng bởi web layer
- errors.py: lỗi trả về client dạng {"error": ...}
"""
