from enum import Enum


class ActivityType(str, Enum):
    SUMMARY = "summary"
    QUIZ = "quiz"
    FLASHCARD = "flashcard"
    MINDMAP = "mindmap"
    VIDEO = "video"
    PICTURE = "picture"
    CHAT = "chat"
    EXAM = "exam"


class ActivityStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    PROCESSING = "processing"


class LearningFormat(str, Enum):
    VIDEO = "video"
    FLASHCARDS = "flashcards"
    MINDMAP = "mindmap"
    QUIZ = "quiz"
    SUMMARY = "summary"


LEARNING_FORMATS = [f.value for f in LearningFormat]
DEFAULT_RECOMMENDATION = LearningFormat.SUMMARY.value

EXAM_START_MARKER = "---EXAM_START---"
EXAM_END_MARKER = "---EXAM_END---"

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_DIFFICULTY = "medium"
