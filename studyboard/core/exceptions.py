# ============================================================================
# Custom Exceptions
# ============================================================================
from typing import Optional

class StudyboardException(Exception):
    """Base exception for Studyboard"""
    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None
    ):
        self.detail = detail
        self.error_code = error_code or "STUDYBOARD_ERROR"
        super().__init__(self.detail)

class UnknownChallengeType(StudyboardException):
    def __init__(self, challenge_type: str):
        super().__init__(
            detail=f"Unknown daily challenge type: {challenge_type}",
            error_code="UNKNOWN_CHALLENGE_TYPE"
        )
        self.challenge_type = challenge_type

class InvalidProgressRecord(StudyboardException):
    def __init__(self, message: str = "Invalid progress record"):
        super().__init__(
            detail=message,
            error_code="INVALID_PROGRESS_RECORD"
        )

class ProgressPersistenceError(StudyboardException):
    def __init__(self, student_id: str, reason: str = ""):
        super().__init__(
            detail=f"Failed to save progress for student {student_id}" + (f": {reason}" if reason else ""),
            error_code="PROGRESS_PERSISTENCE_ERROR"
        )
        self.student_id = student_id
