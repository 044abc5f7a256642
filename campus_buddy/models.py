from pydantic import BaseModel, Field, validator
from typing import List, Optional, Union

from campus_buddy.config import CATEGORIES, MAX_MESSAGE_LENGTH


# ========== CHAT ==========

class ChatRequest(BaseModel):
    """A student message for Campus Buddy."""
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @validator('message')
    def validate_message(cls, v):
        """Ensure message is not just whitespace."""
        if not v.strip():
            raise ValueError("Message is required")
        return v.strip()


class ChatResponse(BaseModel):
    """Answer, or a redirect to SyncSpot when the AI has no answer."""
    response: str
    provider: Optional[str] = None
    no_answer: bool = False
    redirect: Optional[str] = None
    question: Optional[str] = None
    posted: bool = False
    question_id: Optional[Union[str, int]] = None


class ChatErrorResponse(BaseModel):
    error: str
    response: str


# ========== DOCUMENTS ==========

class ProcessDocumentRequest(BaseModel):
    """Parameters of an already-uploaded file to process."""
    file_url: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_type: str = Field(..., min_length=1)
    record_id: str = Field(..., min_length=1)


class ProcessDocumentResponse(BaseModel):
    success: bool
    message: str
    parsed_length: int
    ai_processed: bool


class UploadDocumentResponse(ProcessDocumentResponse):
    record_id: str
    file_url: str
    file_name: str


# ========== FACULTY ==========

class CreateFacultyResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    user_id: Optional[str] = None
    error: Optional[str] = None


# ========== COLLEGE DATA ==========

class CollegeDataCreate(BaseModel):
    """Dashboard form: tags may be a list or a comma-separated string."""
    title: str = Field(..., min_length=1, max_length=300)
    category: str
    content: str = Field(..., min_length=1)
    tags: Optional[List[str]] = None

    @validator('title', 'content')
    def validate_required_text(cls, v):
        if not v.strip():
            raise ValueError("Please fill in all required fields")
        return v.strip()

    @validator('category')
    def validate_category(cls, v):
        if v not in CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORIES)}")
        return v

    @validator('tags', pre=True)
    def split_tags(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = v.split(",")
        tags = [str(tag).strip() for tag in v if str(tag).strip()]
        return tags or None


class CollegeDataRecord(BaseModel):
    id: Union[str, int]
    title: str
    category: str
    content: str
    tags: Optional[List[str]] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    parsed_content: Optional[str] = None


class ListCollegeDataResponse(BaseModel):
    records: List[CollegeDataRecord]
    total_records: int


class DeleteResponse(BaseModel):
    id: str
    message: str
    success: bool


# ========== SYNCSPOT ==========

class QuestionCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @validator('question')
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError("Question cannot be empty or only whitespace")
        return v.strip()


class AnswerCreate(BaseModel):
    answer: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @validator('answer')
    def validate_answer(cls, v):
        if not v.strip():
            raise ValueError("Answer cannot be empty or only whitespace")
        return v.strip()


class SyncSpotAnswer(BaseModel):
    id: Union[str, int]
    question_id: Union[str, int]
    answer: str
    user_id: Optional[str] = None
    created_at: Optional[str] = None


class SyncSpotQuestion(BaseModel):
    id: Union[str, int]
    question: str
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    answers: List[SyncSpotAnswer] = []


class ListQuestionsResponse(BaseModel):
    questions: List[SyncSpotQuestion]
    total_questions: int


# ========== PROFILES ==========

class Profile(BaseModel):
    id: Optional[Union[str, int]] = None
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    user_type: str = "student"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @validator('user_type')
    def validate_user_type(cls, v):
        if v not in ("student", "faculty"):
            raise ValueError("user_type must be 'student' or 'faculty'")
        return v


# ========== SYSTEM ==========

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    mistral_available: bool
    gemini_available: bool
    document_ai_available: bool
