"""Error taxonomy for the service boundaries (scraping, generation, request validation)."""


class AppError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400


class ScrapingError(AppError):
    code = "SCRAPING_ERROR"
    status_code = 502


class GenerationError(AppError):
    code = "GENERATION_ERROR"
    status_code = 503


class SectionDetectionError(AppError):
    code = "SECTION_DETECTION_ERROR"
    status_code = 500
