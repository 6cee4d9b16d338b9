"""
Session engine error taxonomy

Every error here is a client error: it is raised before any mutation and the
surrounding transaction is rolled back.
"""


class QuizSessionError(Exception):
    """Base class for rejected session operations"""

    code = "quiz_session_error"
    status_code = 400
    default_message = "Quiz session request rejected"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NoQuizzesAvailable(QuizSessionError):
    code = "no_quizzes_available"
    default_message = "No quizzes available for the selected filters"


class SessionNotActive(QuizSessionError):
    code = "session_not_active"
    default_message = "Session not found, not owned by user, or already completed"


class QuizNotInSession(QuizSessionError):
    code = "quiz_not_in_session"
    default_message = "Quiz is not part of this session"


class AlreadyAnswered(QuizSessionError):
    code = "already_answered"
    default_message = "Quiz already answered in this session"


class InvalidToken(QuizSessionError):
    code = "invalid_token"
    default_message = "Start token is malformed or has been tampered with"


class SessionNotFound(QuizSessionError):
    code = "session_not_found"
    status_code = 404
    default_message = "Session not found"


class ResultNotAvailable(QuizSessionError):
    code = "result_not_available"
    status_code = 404
    default_message = "Session has not been completed yet"


class QuizNotFound(LookupError):
    """Raised by the content store when a quiz id does not resolve"""
