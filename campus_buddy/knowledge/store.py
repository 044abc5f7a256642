import logging
from typing import Any, Dict, List, Optional

from campus_buddy.config import (
    COLLEGE_DATA_TABLE,
    DOCUMENTS_BUCKET,
    PROFILES_TABLE,
    SYNCSPOT_ANSWERS_TABLE,
    SYNCSPOT_QUESTIONS_TABLE,
)
from campus_buddy.knowledge.supabase_client import get_supabase_client


logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """A Supabase table, storage or auth call failed."""


class CampusStore:
    """
    Table, storage and auth-admin access for the helpdesk.

    Rows travel as plain dicts, exactly as Supabase returns them. Every
    failure from the client is logged and re-raised as StoreError.
    """

    def __init__(self, client=None, service_client=None):

        self._client = client
        self._service_client = service_client


    @property
    def client(self):

        if self._client is None:
            self._client = self._connect(service_role=False)

        return self._client


    @property
    def service_client(self):

        if self._service_client is None:
            self._service_client = self._connect(service_role=True)

        return self._service_client


    def _connect(self, service_role: bool):

        try:

            return get_supabase_client(service_role=service_role)

        except Exception as e:

            logger.error(
                "Supabase client unavailable",
                extra={"service_role": service_role, "error": str(e)},
            )

            raise StoreError(f"Database unavailable: {e}") from e


    def _execute(self, query, action: str) -> List[Dict[str, Any]]:

        try:

            response = query.execute()

        except Exception as e:

            logger.error(
                "Supabase query failed",
                extra={"action": action, "error": str(e)},
            )

            raise StoreError(f"Failed to {action}") from e

        return response.data or []


    # ============================================================
    # COLLEGE DATA
    # ============================================================

    def list_college_data(self) -> List[Dict]:

        return self._execute(
            self.client.table(COLLEGE_DATA_TABLE)
            .select("*")
            .order("created_at", desc=True),
            "fetch college data",
        )


    def get_college_data(self, record_id: str) -> Optional[Dict]:

        rows = self._execute(
            self.client.table(COLLEGE_DATA_TABLE)
            .select("*")
            .eq("id", record_id)
            .limit(1),
            "fetch college data record",
        )

        return rows[0] if rows else None


    def create_college_data(self, row: Dict) -> Dict:

        rows = self._execute(
            self.service_client.table(COLLEGE_DATA_TABLE).insert(row),
            "add college data",
        )

        if not rows:
            raise StoreError("Failed to add college data")

        return rows[0]


    def update_college_data(self, record_id: str, fields: Dict) -> List[Dict]:

        return self._execute(
            self.service_client.table(COLLEGE_DATA_TABLE)
            .update(fields)
            .eq("id", record_id),
            "update college data",
        )


    def delete_college_data(self, record_id: str) -> bool:

        rows = self._execute(
            self.service_client.table(COLLEGE_DATA_TABLE)
            .delete()
            .eq("id", record_id),
            "delete college data",
        )

        return bool(rows)


    # ============================================================
    # SYNCSPOT
    # ============================================================

    def list_questions(self) -> List[Dict]:
        """Questions newest first, each carrying its answers oldest first."""

        questions = self._execute(
            self.client.table(SYNCSPOT_QUESTIONS_TABLE)
            .select("*")
            .order("created_at", desc=True),
            "load questions",
        )

        answers = self._execute(
            self.client.table(SYNCSPOT_ANSWERS_TABLE)
            .select("*")
            .order("created_at"),
            "load answers",
        )

        by_question: Dict[str, List[Dict]] = {}

        for answer in answers:
            by_question.setdefault(answer.get("question_id"), []).append(answer)

        return [
            {**question, "answers": by_question.get(question.get("id"), [])}
            for question in questions
        ]


    def get_question(self, question_id: str) -> Optional[Dict]:

        rows = self._execute(
            self.client.table(SYNCSPOT_QUESTIONS_TABLE)
            .select("*")
            .eq("id", question_id)
            .limit(1),
            "fetch question",
        )

        return rows[0] if rows else None


    def create_question(self, question: str, user_id: Optional[str]) -> Dict:

        rows = self._execute(
            self.service_client.table(SYNCSPOT_QUESTIONS_TABLE).insert(
                {"question": question, "user_id": user_id}
            ),
            "post question",
        )

        if not rows:
            raise StoreError("Failed to post question")

        return rows[0]


    def create_answer(self, question_id: str, answer: str, user_id: str) -> Dict:

        rows = self._execute(
            self.service_client.table(SYNCSPOT_ANSWERS_TABLE).insert(
                {"question_id": question_id, "answer": answer, "user_id": user_id}
            ),
            "submit answer",
        )

        if not rows:
            raise StoreError("Failed to submit answer")

        return rows[0]


    def delete_question(self, question_id: str) -> bool:
        """
        Remove the question, then any answers the FK cascade left behind.
        Answers are only touched once the question row is gone.
        """

        rows = self._execute(
            self.service_client.table(SYNCSPOT_QUESTIONS_TABLE)
            .delete()
            .eq("id", question_id),
            "delete question",
        )

        if not rows:
            return False

        self._execute(
            self.service_client.table(SYNCSPOT_ANSWERS_TABLE)
            .delete()
            .eq("question_id", question_id),
            "delete answers",
        )

        return True


    # ============================================================
    # PROFILES
    # ============================================================

    def get_profile(self, user_id: str) -> Optional[Dict]:

        rows = self._execute(
            self.client.table(PROFILES_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1),
            "fetch profile",
        )

        return rows[0] if rows else None


    def upsert_profile(self, row: Dict) -> None:

        self._execute(
            self.service_client.table(PROFILES_TABLE).upsert(row),
            "upsert profile",
        )


    # ============================================================
    # STORAGE
    # ============================================================

    def download_document(self, path: str) -> bytes:

        try:

            return self.service_client.storage.from_(DOCUMENTS_BUCKET).download(path)

        except Exception as e:

            logger.error(
                "Error downloading file",
                extra={"path": path, "error": str(e)},
            )

            raise StoreError("Failed to download file for processing") from e


    def upload_document(self, path: str, data: bytes, content_type: str) -> str:
        """Upload to the documents bucket and return the public URL."""

        bucket = self.service_client.storage.from_(DOCUMENTS_BUCKET)

        try:

            bucket.upload(path, data, {"content-type": content_type})

            return bucket.get_public_url(path)

        except Exception as e:

            logger.error(
                "Error uploading file",
                extra={"path": path, "error": str(e)},
            )

            raise StoreError("Failed to upload file") from e


    # ============================================================
    # AUTH ADMIN
    # ============================================================

    def find_user_by_email(self, email: str, per_page: int = 1000):

        admin = self.service_client.auth.admin
        page = 1

        try:

            while True:

                users = admin.list_users(page=page, per_page=per_page)

                for user in users:
                    if user.email == email:
                        return user

                if len(users) < per_page:
                    return None

                page += 1

        except Exception as e:

            logger.error(
                "Listing users failed",
                extra={"error": str(e)},
            )

            raise StoreError("Failed to list users") from e


    def create_user(self, attributes: Dict):

        try:

            response = self.service_client.auth.admin.create_user(attributes)

        except Exception as e:

            raise StoreError(str(e)) from e

        if not response or not response.user:
            raise StoreError("User creation returned no user")

        return response.user
