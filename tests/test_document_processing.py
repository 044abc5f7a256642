# tests/test_document_processing.py
import io
from types import SimpleNamespace

import docx
import pytest

from campus_buddy.knowledge import loader
from campus_buddy.knowledge.store import StoreError
from campus_buddy.llm.client import DocumentAIClient
from campus_buddy.workflow.document_processing import (
    RecordNotFound,
    extract_content,
    process_document,
    storage_path_from_url,
)


def make_docx(paragraphs, table_rows=()):
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class TestDetectKind:

    @pytest.mark.parametrize("name, mime, kind", [
        ("notice.txt", "application/octet-stream", loader.TEXT),
        ("notes.md", "text/markdown", loader.TEXT),
        ("syllabus.pdf", "application/pdf", loader.PDF),
        ("timetable.png", "image/png", loader.IMAGE),
        ("handbook.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", loader.WORD),
        ("old.doc", "application/msword", loader.LEGACY_WORD),
        ("fees.xlsx", "application/vnd.ms-excel", loader.EXCEL),
        ("orientation.pptx", "application/vnd.ms-powerpoint", loader.POWERPOINT),
        ("archive.zip", "application/zip", loader.GENERIC),
    ])
    def test_kinds(self, name, mime, kind):
        assert loader.detect_kind(name, mime) == kind

    def test_text_mime_wins_over_extension(self):
        assert loader.detect_kind("report.pdf", "text/plain") == loader.TEXT


class TestLoader:

    def test_plain_text_with_bad_bytes(self):
        text = loader.load_text(b"Exam hall \xff B", loader.TEXT, "a.txt", "text/plain")

        assert text.startswith("Exam hall")
        assert "�" in text

    def test_docx_paragraphs_and_tables(self):
        data = make_docx(
            ["Department of Physics", "HOD: Dr. Rao"],
            [("Day", "Lab"), ("Monday", "Optics")],
        )

        text = loader.load_text(data, loader.WORD, "physics.docx", "application/msword")

        assert "Department of Physics" in text
        assert "HOD: Dr. Rao" in text
        assert "Monday | Optics" in text

    def test_unreadable_pdf_falls_back_to_description(self):
        text = loader.load_text(b"not a pdf", loader.PDF, "broken.pdf", "application/pdf")

        assert text.startswith("PDF Document: broken.pdf")

    def test_excel_description(self):
        text = loader.load_text(b"...", loader.EXCEL, "fees.xlsx", "application/vnd.ms-excel")

        assert text.startswith("Excel Document: fees.xlsx")

    def test_generic_description_mentions_type(self):
        text = loader.load_text(b"...", loader.GENERIC, "x.zip", "application/zip")

        assert "File type: application/zip" in text

    def test_character_limit(self, monkeypatch):
        monkeypatch.setattr(loader, "MAX_DOCUMENT_CHARACTERS", 10)

        assert loader.enforce_character_limit("x" * 50) == "x" * 10


class TestDocumentAIClient:

    @pytest.fixture
    def offline(self, monkeypatch):
        monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
        return DocumentAIClient()

    def test_structure_without_key_returns_content(self, offline):
        assert offline.available is False
        assert offline.structure_document("raw", "text/plain", "a.txt") == ("raw", False)

    def test_ocr_without_key(self, offline):
        text, ai_processed = offline.ocr_image(b"img", "map.png")

        assert ai_processed is False
        assert text.startswith("Image Document: map.png\nContent:")
        assert "not available without Mistral API key" in text

    def test_structure_error_returns_content(self, monkeypatch):
        client = DocumentAIClient(api_key="test-key")

        def boom(**kwargs):
            raise ConnectionError("network down")

        client.client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=boom)))

        assert client.structure_document("raw", "text/plain", "a.txt") == ("raw", False)

    def test_ocr_success_sends_data_url(self):
        client = DocumentAIClient(api_key="test-key")
        captured = {}

        def create(**kwargs):
            captured.update(kwargs)
            message = SimpleNamespace(content="Room 101 - Maths")
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        client.client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

        text, ai_processed = client.ocr_image(b"\x89PNG", "rooms.png", "image/png")

        assert ai_processed is True
        assert text == "Image Document: rooms.png\n\nExtracted Content:\nRoom 101 - Maths"

        image_part = captured["messages"][1]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")

    def test_ocr_empty_result(self):
        client = DocumentAIClient(api_key="test-key")
        message = SimpleNamespace(content="")
        client.client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=lambda **kw: SimpleNamespace(choices=[SimpleNamespace(message=message)])
        )))

        text, ai_processed = client.ocr_image(b"x", "blank.jpg")

        assert ai_processed is False
        assert "no text was extracted" in text


class TestProcessDocument:

    FILE_URL = "https://fake.supabase.co/storage/v1/object/public/college-documents/rec-1-abc.txt"

    def test_storage_path_from_url(self):
        assert storage_path_from_url(self.FILE_URL) == "rec-1-abc.txt"
        assert storage_path_from_url(self.FILE_URL + "?") == "rec-1-abc.txt"

    def test_text_document_updates_record(self, store, fake_db, fake_document_ai, seed_college_data):
        record = seed_college_data()
        fake_db.files["rec-1-abc.txt"] = b"Sports day on 12 March"

        result = process_document(
            self.FILE_URL, "sports.txt", "text/plain", record["id"], store, fake_document_ai
        )

        assert result["success"] is True
        assert result["ai_processed"] is True
        assert result["parsed_length"] == len("STRUCTURED: Sports day on 12 March")

        row = fake_db.tables["college_data"][0]
        assert row["parsed_content"] == "STRUCTURED: Sports day on 12 March"
        assert row["file_name"] == "sports.txt"
        assert row["file_type"] == "text/plain"
        assert row["file_url"] == self.FILE_URL

    def test_image_goes_to_ocr(self, fake_document_ai):
        result = extract_content(b"\xff\xd8", "bus.jpg", "image/jpeg", fake_document_ai)

        assert result["kind"] == loader.IMAGE
        assert "Extracted Content:\nBus timetable" in result["parsed_content"]
        assert fake_document_ai.ocr_calls[0][2] == "image/jpeg"
        assert fake_document_ai.structured == []

    def test_word_placeholder_is_structured(self, fake_document_ai):
        extract_content(b"legacy", "rules.doc", "application/msword", fake_document_ai)

        content, _, file_name = fake_document_ai.structured[0]
        assert content.startswith("Word Document: rules.doc")
        assert file_name == "rules.doc"

    def test_missing_file(self, store, fake_document_ai, seed_college_data):
        record = seed_college_data()

        with pytest.raises(StoreError, match="download"):
            process_document(self.FILE_URL, "sports.txt", "text/plain", record["id"], store, fake_document_ai)

    def test_unknown_record(self, store, fake_db, fake_document_ai):
        fake_db.files["rec-1-abc.txt"] = b"text"

        with pytest.raises(RecordNotFound):
            process_document(self.FILE_URL, "sports.txt", "text/plain", "missing", store, fake_document_ai)
