# tests/test_store.py
import pytest

from campus_buddy.knowledge.store import StoreError


class TestConnection:

    def test_missing_credentials_raise_store_error(self, unconfigured_store):
        with pytest.raises(StoreError, match="SUPABASE_URL"):
            unconfigured_store.list_college_data()

    def test_service_client_failure_is_store_error(self, unconfigured_store):
        with pytest.raises(StoreError):
            unconfigured_store.find_user_by_email("keystone")

        with pytest.raises(StoreError):
            unconfigured_store.upload_document("a.txt", b"abc", "text/plain")


class TestDeleteQuestion:

    def test_removes_question_and_answers(self, store, fake_db):
        question = fake_db.add_row("syncspot_questions", {"question": "Pool?", "user_id": "s1"})
        fake_db.add_row("syncspot_answers", {"question_id": question["id"], "answer": "Yes", "user_id": "s2"})

        assert store.delete_question(question["id"]) is True

        assert fake_db.tables["syncspot_questions"] == []
        assert fake_db.tables["syncspot_answers"] == []

    def test_failed_delete_keeps_answers(self, store, fake_db):
        question = fake_db.add_row("syncspot_questions", {"question": "Pool?", "user_id": "s1"})
        fake_db.add_row("syncspot_answers", {"question_id": question["id"], "answer": "Yes", "user_id": "s2"})
        fake_db.failing_tables.add("syncspot_questions")

        with pytest.raises(StoreError):
            store.delete_question(question["id"])

        assert len(fake_db.tables["syncspot_answers"]) == 1

    def test_unknown_question_leaves_other_answers(self, store, fake_db):
        fake_db.add_row("syncspot_answers", {"question_id": "missing", "answer": "orphan", "user_id": "s2"})

        assert store.delete_question("missing") is False
        assert len(fake_db.tables["syncspot_answers"]) == 1
