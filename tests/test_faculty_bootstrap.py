# tests/test_faculty_bootstrap.py
from types import SimpleNamespace

import pytest

from campus_buddy.config import FACULTY_EMAIL, FACULTY_FULL_NAME
from campus_buddy.workflow.faculty_bootstrap import (
    FacultyCreationError,
    create_faculty_account,
)


def test_creates_user_and_profile(store, fake_db):
    result = create_faculty_account(store)

    assert result["success"] is True
    assert result["message"] == "Faculty account created successfully"

    attributes = fake_db.created_users[0]
    assert attributes["email"] == FACULTY_EMAIL
    assert attributes["email_confirm"] is True
    assert attributes["user_metadata"] == {"full_name": FACULTY_FULL_NAME, "user_type": "faculty"}

    profile = fake_db.tables["profiles"][0]
    assert profile["user_id"] == result["user_id"]
    assert profile["user_type"] == "faculty"


def test_existing_user_is_not_recreated(store, fake_db):
    fake_db.users.append(SimpleNamespace(id="u-1", email=FACULTY_EMAIL, user_metadata={}))

    result = create_faculty_account(store)

    assert result == {
        "success": True,
        "message": "Faculty account already exists",
        "user_id": "u-1",
    }
    assert fake_db.created_users == []


def test_second_call_is_idempotent(store, fake_db):
    first = create_faculty_account(store)
    second = create_faculty_account(store)

    assert second["message"] == "Faculty account already exists"
    assert second["user_id"] == first["user_id"]
    assert len(fake_db.users) == 1


def test_lookup_pages_through_users(store, fake_db):
    fake_db.users.extend(
        SimpleNamespace(id=f"u-{i}", email=f"s{i}@example.edu", user_metadata={})
        for i in range(5)
    )
    fake_db.users.append(SimpleNamespace(id="fac", email=FACULTY_EMAIL, user_metadata={}))

    assert store.find_user_by_email(FACULTY_EMAIL, per_page=2).id == "fac"
    assert store.find_user_by_email("nobody@example.edu", per_page=2) is None


def test_auth_rejection_raises(store, fake_db):
    fake_db.create_user_error = "Password should be at least 6 characters"

    with pytest.raises(FacultyCreationError, match="at least 6 characters"):
        create_faculty_account(store)


def test_profile_failure_is_tolerated(store, fake_db):
    fake_db.failing_tables.add("profiles")

    result = create_faculty_account(store)

    assert result["message"] == "Faculty account created successfully"
    assert len(fake_db.users) == 1
