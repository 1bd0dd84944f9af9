"""
Errors của mood recommendation pipeline.

Được render thành `{"error": message}` bởi exception handler trong watchly.main.
"""


class RecommendationError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MoodRequiredError(RecommendationError):
    status_code = 400

    def __init__(self, message: str = "Mood is required"):
        super().__init__(message)


class LLMNotConfiguredError(RecommendationError):
    status_code = 500

    def __init__(self, message: str = "OpenAI API key not configured"):
        super().__init__(message)


class UpstreamLLMError(RecommendationError):
    status_code = 500
