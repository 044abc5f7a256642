# campus_buddy/workflow/faculty_bootstrap.py
import logging
from typing import Dict

from campus_buddy.config import FACULTY_EMAIL, FACULTY_FULL_NAME, FACULTY_PASSWORD
from campus_buddy.knowledge.store import StoreError

logger = logging.getLogger(__name__)


class FacultyCreationError(RuntimeError):
    """The auth admin API refused to create the faculty user."""


def create_faculty_account(
    store,
    email: str = FACULTY_EMAIL,
    password: str = FACULTY_PASSWORD,
) -> Dict:
    """
    Idempotently provision the shared faculty login.

    Email confirmation is bypassed. The profile upsert is best effort
    because a database trigger may already have created the row.
    """
    logger.info("Creating faculty account", extra={"email": email})

    existing = store.find_user_by_email(email)

    if existing:

        logger.info("Faculty user already exists", extra={"user_id": existing.id})

        return {
            "success": True,
            "message": "Faculty account already exists",
            "user_id": existing.id,
        }

    try:

        user = store.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {
                "full_name": FACULTY_FULL_NAME,
                "user_type": "faculty",
            },
        })

    except StoreError as e:

        logger.error("Error creating faculty user", extra={"error": str(e)})

        raise FacultyCreationError(str(e)) from e

    logger.info("Faculty user created", extra={"user_id": user.id})

    try:

        store.upsert_profile({
            "user_id": user.id,
            "full_name": FACULTY_FULL_NAME,
            "email": email,
            "user_type": "faculty",
        })

    except StoreError as e:

        logger.warning(
            "Error creating faculty profile",
            extra={"user_id": user.id, "error": str(e)},
        )

    return {
        "success": True,
        "message": "Faculty account created successfully",
        "user_id": user.id,
    }
