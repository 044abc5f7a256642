# campus_buddy/workflow/campus_chat.py
import logging
from typing import Dict, List, Optional

from campus_buddy.config import NO_INFO_SENTINEL
from campus_buddy.knowledge.store import StoreError
from campus_buddy.prompts.prompt_builder import build_chat_prompt
from campus_buddy.prompts.system_prompts import (
    SYNCSPOT_ALREADY_ASKED_MESSAGE,
    SYNCSPOT_NOT_POSTED_MESSAGE,
    SYNCSPOT_REDIRECT_MESSAGE,
)

logger = logging.getLogger(__name__)


def extract_unanswered_question(answer: str, message: str) -> Optional[str]:
    """
    Returns the question to post to SyncSpot when ``answer`` carries the
    no-answer sentinel, otherwise None. An empty question after the
    sentinel falls back to the student's own message.
    """
    text = (answer or "").strip()

    if not text.startswith(NO_INFO_SENTINEL):
        return None

    question = text[len(NO_INFO_SENTINEL):].strip()

    # Models sometimes echo the template brackets
    if question.startswith("[") and question.endswith("]"):
        question = question[1:-1].strip()

    return question or message


def _normalize(text: str) -> str:
    return " ".join((text or "").lower().split())


def find_existing_question(question: str, questions: List[Dict]) -> Optional[Dict]:

    wanted = _normalize(question)

    for existing in questions:
        if _normalize(existing.get("question", "")) == wanted:
            return existing

    return None


def _load_community(store) -> List[Dict]:

    try:
        return store.list_questions()

    except StoreError as e:
        logger.error("SyncSpot data error", extra={"error": str(e)})
        return []


def _redirect_to_syncspot(
    store,
    question: str,
    user_id: Optional[str],
    community: List[Dict],
    provider: str,
) -> Dict:

    existing = find_existing_question(question, community)

    if existing:

        logger.info(
            "Question already on SyncSpot",
            extra={"question_id": existing.get("id")},
        )

        return {
            "response": SYNCSPOT_ALREADY_ASKED_MESSAGE,
            "provider": provider,
            "no_answer": True,
            "redirect": "syncspot",
            "question": question,
            "posted": False,
            "question_id": existing.get("id"),
        }

    try:

        created = store.create_question(question, user_id)

    except StoreError as e:

        logger.error(
            "Posting to SyncSpot failed",
            extra={"error": str(e), "user_id": user_id},
        )

        return {
            "response": SYNCSPOT_NOT_POSTED_MESSAGE,
            "provider": provider,
            "no_answer": True,
            "redirect": "syncspot",
            "question": question,
            "posted": False,
            "question_id": None,
        }

    logger.info(
        "Question posted to SyncSpot",
        extra={"question_id": created.get("id"), "user_id": user_id},
    )

    return {
        "response": SYNCSPOT_REDIRECT_MESSAGE,
        "provider": provider,
        "no_answer": True,
        "redirect": "syncspot",
        "question": question,
        "posted": True,
        "question_id": created.get("id"),
    }


def answer_message(
    message: str,
    store,
    llm_client,
    user_id: Optional[str] = None,
) -> Dict:
    """
    Answer a student message from college data and community answers.

    Raises StoreError when college data cannot be loaded and
    NoProviderAvailable when every LLM provider fails; the caller turns
    both into the generic apology.
    """
    records = store.list_college_data()
    community = _load_community(store)

    prompt = build_chat_prompt(message, records, community)

    answer, provider = llm_client.generate_with_provider(prompt)

    question = extract_unanswered_question(answer, message)

    if question is not None:
        return _redirect_to_syncspot(store, question, user_id, community, provider)

    return {
        "response": answer,
        "provider": provider,
        "no_answer": False,
        "redirect": None,
        "question": None,
        "posted": False,
        "question_id": None,
    }
