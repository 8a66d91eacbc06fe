from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# --- Analyze / Summarize ---

class TextRequest(BaseModel):
    text: Optional[str] = None


class VocabEntry(BaseModel):
    word: str
    meaning: str


class AnalyzeResponse(BaseModel):
    result: List[VocabEntry]
    structured: bool = True


class SummaryResult(BaseModel):
    summary: str
    keyPoints: List[str] = []
    wordCount: int = 0
    originalWordCount: int = 0


class SummarizeResponse(BaseModel):
    result: SummaryResult
    structured: bool = True


# --- Quiz / Mind map ---

class QuizQuestion(BaseModel):
    id: int
    question: str
    options: List[str]
    correctAnswer: int = 0
    explanation: str = "No explanation available"
    category: str = "General"


class QuizResponse(BaseModel):
    result: List[QuizQuestion]
    structured: bool = True


class MindMap(BaseModel):
    title: str = ""
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    connections: List[Dict[str, Any]] = Field(default_factory=list)


class MindMapResponse(BaseModel):
    result: MindMap
    structured: bool = True


# --- Chat ---

class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: Optional[Any] = None
    conversationHistory: List[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    model: str
    timestamp: str
    structured: bool = True


# --- PDF / Exam ---

class ExtractPDFResponse(BaseModel):
    extractedText: str
    processedContent: Union[Dict[str, Any], str]
    structured: bool = True


class ExamResponse(BaseModel):
    examContent: str
    structured: bool = True


class RefineExamRequest(BaseModel):
    currentExam: Optional[str] = None
    refinementInstructions: Optional[str] = None
    difficulty: Optional[str] = None


# --- Recommendation ---

class RecommendRequest(BaseModel):
    userInput: Optional[str] = None


class RecommendResponse(BaseModel):
    recommendation: str


# --- Auth ---

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    idToken: Optional[str] = None
    accessToken: Optional[str] = None
    refreshToken: Optional[str] = None
    expiresIn: Optional[int] = None
    email: str


# --- History ---

class RecordActivityRequest(BaseModel):
    userEmail: Optional[str] = None
    activityType: Optional[str] = None
    title: Optional[str] = None
    inputText: Optional[str] = None
    result: Optional[Any] = None
    status: str = "completed"
    duration: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None


class RecordActivityResponse(BaseModel):
    success: bool
    activityId: int
    message: str


class ActivityItem(BaseModel):
    id: int
    type: str
    title: str
    inputText: Optional[str] = None
    result: Optional[Any] = None
    status: str
    duration: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None


class HistoryResponse(BaseModel):
    activities: List[ActivityItem] = Field(default_factory=list)
    total: int
    user: str
