from fastapi import APIRouter, Depends, File, Header, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
import logging
import mimetypes
import os
import time
import uuid

from typing import Dict, Optional

from campus_buddy.config import ALLOWED_FILE_EXTENSIONS, MAX_FILE_SIZE_MB
from campus_buddy.observability.metrics import metrics_tracker
from campus_buddy.observability.posthog_client import posthog_client

from campus_buddy.models import (
    AnswerCreate,
    ChatErrorResponse,
    ChatRequest,
    ChatResponse,
    CollegeDataCreate,
    CollegeDataRecord,
    CreateFacultyResponse,
    DeleteResponse,
    HealthResponse,
    ListCollegeDataResponse,
    ListQuestionsResponse,
    ProcessDocumentRequest,
    ProcessDocumentResponse,
    Profile,
    QuestionCreate,
    SyncSpotAnswer,
    SyncSpotQuestion,
    UploadDocumentResponse,
)

from campus_buddy.knowledge.store import CampusStore, StoreError
from campus_buddy.llm.client import DocumentAIClient
from campus_buddy.llm.multi_model_client import MultiModelLLMClient
from campus_buddy.prompts.system_prompts import CHAT_APOLOGY
from campus_buddy.workflow.campus_chat import answer_message
from campus_buddy.workflow.document_processing import RecordNotFound, process_document
from campus_buddy.workflow.faculty_bootstrap import FacultyCreationError, create_faculty_account


logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================
# GLOBAL SINGLETONS
# ============================================================

store = CampusStore()

llm_client = MultiModelLLMClient()

document_ai = DocumentAIClient()


# ============================================================
# CALLER IDENTITY
# ============================================================

# Sign-in happens against Supabase directly; the UI forwards the
# signed-in user's id in this header.

def get_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    return None


def require_user(user_id: Optional[str] = Depends(get_user_id)) -> str:

    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in required")

    return user_id


def require_faculty(user_id: str = Depends(require_user)) -> Dict:

    try:
        profile = store.get_profile(user_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not profile or profile.get("user_type") != "faculty":
        raise HTTPException(status_code=403, detail="Faculty access required")

    return profile


def _distinct_id(request: Request, user_id: Optional[str]) -> str:
    return user_id or getattr(request.state, "request_id", "anonymous")


# ============================================================
# HELPERS
# ============================================================

def validate_file(filename: str, content: bytes):

    extension = os.path.splitext(filename or "")[1].lower()

    if extension not in ALLOWED_FILE_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {extension or 'none'}",
        )

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    size_mb = len(content) / (1024 * 1024)

    if size_mb > MAX_FILE_SIZE_MB:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {size_mb:.2f}MB",
        )


def generate_storage_path(record_id: str, filename: str) -> str:

    extension = os.path.splitext(filename)[1].lower()

    return f"{record_id}-{uuid.uuid4().hex[:12]}{extension}"


# ============================================================
# HEALTH
# ============================================================

@router.get("/health", response_model=HealthResponse)
def health_check():

    stats = llm_client.get_usage_stats()

    return HealthResponse(
        status="healthy",
        mistral_available=stats["mistral_available"],
        gemini_available=stats["gemini_available"],
        document_ai_available=document_ai.available,
    )


# ============================================================
# AI CHAT
# ============================================================

@router.post(
    "/ai-chat",
    response_model=ChatResponse,
    responses={500: {"model": ChatErrorResponse}},
)
def ai_chat(
    payload: ChatRequest,
    request: Request,
    user_id: Optional[str] = Depends(get_user_id),
):

    start_time = time.time()
    distinct_id = _distinct_id(request, user_id)

    try:

        result = answer_message(
            message=payload.message,
            store=store,
            llm_client=llm_client,
            user_id=user_id,
        )

    except Exception as e:

        logger.error(
            "Error in ai-chat",
            extra={"error": str(e), "error_type": type(e).__name__},
        )

        metrics_tracker.record_chat(provider=None)

        posthog_client.track_error(
            distinct_id=distinct_id,
            error_type=type(e).__name__,
            error_message=str(e),
            endpoint="/ai-chat",
        )

        return JSONResponse(
            status_code=500,
            content={"error": str(e), "response": CHAT_APOLOGY},
        )

    latency = time.time() - start_time

    metrics_tracker.record_chat(
        provider=result["provider"],
        redirected=result["no_answer"],
    )

    posthog_client.track_chat(
        distinct_id=distinct_id,
        message=payload.message,
        provider=result["provider"],
        latency=latency,
        answered=not result["no_answer"],
    )

    if result["no_answer"]:
        posthog_client.track_syncspot_redirect(
            distinct_id=distinct_id,
            question=result["question"],
            posted=result["posted"],
        )

    return ChatResponse(**result)


# ============================================================
# DOCUMENT PROCESSING
# ============================================================

def _run_processing(distinct_id: str, **params) -> Dict:

    start_time = time.time()

    result = process_document(store=store, document_ai=document_ai, **params)

    metrics_tracker.record_document_processed()

    posthog_client.track_document_processed(
        distinct_id=distinct_id,
        record_id=params["record_id"],
        file_type=params["file_type"],
        parsed_length=result["parsed_length"],
        ai_processed=result["ai_processed"],
        latency=time.time() - start_time,
    )

    return result


def _processing_failure(distinct_id: str, e: Exception, endpoint: str):

    status_code = 404 if isinstance(e, RecordNotFound) else 500

    logger.error(
        "Error in process-document",
        extra={"error": str(e), "error_type": type(e).__name__},
    )

    posthog_client.track_error(
        distinct_id=distinct_id,
        error_type=type(e).__name__,
        error_message=str(e),
        endpoint=endpoint,
    )

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": str(e)},
    )


@router.post("/process-document", response_model=ProcessDocumentResponse)
def process_document_endpoint(
    payload: ProcessDocumentRequest,
    request: Request,
    user_id: Optional[str] = Depends(get_user_id),
):

    distinct_id = _distinct_id(request, user_id)

    try:

        result = _run_processing(
            distinct_id,
            file_url=payload.file_url,
            file_name=payload.file_name,
            file_type=payload.file_type,
            record_id=payload.record_id,
        )

    except (StoreError, RecordNotFound) as e:

        return _processing_failure(distinct_id, e, "/process-document")

    return ProcessDocumentResponse(**result)


@router.post(
    "/college-data/{record_id}/document",
    response_model=UploadDocumentResponse,
)
async def upload_document(
    record_id: str,
    request: Request,
    file: UploadFile = File(...),
    profile: Dict = Depends(require_faculty),
):

    content = await file.read()

    validate_file(file.filename, content)

    try:
        record = store.get_college_data(record_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not record:
        raise HTTPException(status_code=404, detail="College data not found")

    file_type = (
        file.content_type
        or mimetypes.guess_type(file.filename)[0]
        or "application/octet-stream"
    )

    distinct_id = _distinct_id(request, profile.get("user_id"))

    try:

        file_url = store.upload_document(
            generate_storage_path(record_id, file.filename),
            content,
            file_type,
        )

        result = _run_processing(
            distinct_id,
            file_url=file_url,
            file_name=file.filename,
            file_type=file_type,
            record_id=record_id,
        )

    except (StoreError, RecordNotFound) as e:

        return _processing_failure(
            distinct_id, e, "/college-data/{record_id}/document"
        )

    return UploadDocumentResponse(
        record_id=record_id,
        file_url=file_url,
        file_name=file.filename,
        **result,
    )


# ============================================================
# FACULTY BOOTSTRAP
# ============================================================

@router.post("/create-faculty", response_model=CreateFacultyResponse)
def create_faculty():

    try:

        result = create_faculty_account(store)

    except FacultyCreationError as e:

        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(e)},
        )

    except Exception as e:

        logger.error("Error in create-faculty", extra={"error": str(e)})

        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e)},
        )

    return CreateFacultyResponse(**result)


# ============================================================
# COLLEGE DATA (FACULTY DASHBOARD)
# ============================================================

@router.get("/college-data", response_model=ListCollegeDataResponse)
def list_college_data():

    try:
        rows = store.list_college_data()
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load college data.")

    records = [CollegeDataRecord(**row) for row in rows]

    return ListCollegeDataResponse(records=records, total_records=len(records))


@router.post("/college-data", response_model=CollegeDataRecord, status_code=201)
def create_college_data(
    payload: CollegeDataCreate,
    profile: Dict = Depends(require_faculty),
):

    try:

        row = store.create_college_data({
            "title": payload.title,
            "category": payload.category,
            "content": payload.content,
            "tags": payload.tags,
            "created_by": profile.get("user_id"),
        })

    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to add college data.")

    logger.info(
        "College data added",
        extra={"record_id": row.get("id"), "category": payload.category},
    )

    return CollegeDataRecord(**row)


@router.delete("/college-data/{record_id}", response_model=DeleteResponse)
def delete_college_data(
    record_id: str,
    profile: Dict = Depends(require_faculty),
):

    try:
        deleted = store.delete_college_data(record_id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to delete data.")

    if not deleted:
        raise HTTPException(status_code=404, detail="College data not found")

    return DeleteResponse(id=record_id, message="Data deleted successfully!", success=True)


# ============================================================
# SYNCSPOT
# ============================================================

@router.get("/syncspot/questions", response_model=ListQuestionsResponse)
def list_questions():

    try:
        rows = store.list_questions()
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load questions")

    questions = [SyncSpotQuestion(**row) for row in rows]

    return ListQuestionsResponse(questions=questions, total_questions=len(questions))


@router.post("/syncspot/questions", response_model=SyncSpotQuestion, status_code=201)
def post_question(
    payload: QuestionCreate,
    user_id: str = Depends(require_user),
):

    try:
        row = store.create_question(payload.question, user_id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to post question")

    return SyncSpotQuestion(**row)


@router.post(
    "/syncspot/questions/{question_id}/answers",
    response_model=SyncSpotAnswer,
    status_code=201,
)
def post_answer(
    question_id: str,
    payload: AnswerCreate,
    user_id: str = Depends(require_user),
):

    try:

        if not store.get_question(question_id):
            raise HTTPException(status_code=404, detail="Question not found")

        row = store.create_answer(question_id, payload.answer, user_id)

    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to submit answer")

    return SyncSpotAnswer(**row)


@router.delete("/syncspot/questions/{question_id}", response_model=DeleteResponse)
def delete_question(
    question_id: str,
    user_id: str = Depends(require_user),
):

    try:

        question = store.get_question(question_id)

        if not question:
            raise HTTPException(status_code=404, detail="Question not found")

        if question.get("user_id") != user_id:
            raise HTTPException(
                status_code=403,
                detail="Only the author can delete this question",
            )

        store.delete_question(question_id)

    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to delete question")

    return DeleteResponse(
        id=question_id,
        message="Question deleted successfully",
        success=True,
    )


# ============================================================
# PROFILES
# ============================================================

@router.get("/profiles/{user_id}", response_model=Profile)
def get_profile(user_id: str):

    try:
        row = store.get_profile(user_id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load profile")

    if not row:
        raise HTTPException(status_code=404, detail="Profile not found")

    return Profile(**row)


# ============================================================
# METRICS ENDPOINT
# ============================================================

@router.get("/metrics")
def get_metrics():

    return metrics_tracker.get_metrics()
