# campus_buddy/prompts/prompt_builder.py

from typing import Dict, List, Optional

from campus_buddy.prompts.system_prompts import (
    DOCUMENT_PROCESSING_PROMPT,
    college_assistant_prompt,
)


def format_college_record(record: Dict) -> str:

    tags = ", ".join(record.get("tags") or [])

    text = (
        f"Title: {record.get('title', '')}\n"
        f"Category: {record.get('category', '')}\n"
        f"Content: {record.get('content', '')}\n"
        f"Tags: {tags}"
    )

    if record.get("parsed_content"):
        text += f"\nDocument Content: {record['parsed_content']}"

    if record.get("file_name"):
        file_type = record.get("file_type") or "unknown type"
        text += f"\nAttached File: {record['file_name']} ({file_type})"

    return text + "\n---"


def build_college_context(records: List[Dict]) -> str:

    return "\n\n".join(format_college_record(r) for r in records)


def build_community_context(questions: List[Dict]) -> str:
    """
    Only answered questions are useful context; open questions
    are skipped.
    """

    blocks = []

    for question in questions:

        answers = question.get("answers") or []

        if not answers:
            continue

        answer_lines = "\n".join(
            f"Answer: {a.get('answer', '')}" for a in answers
        )

        blocks.append(
            f"Community Q&A:\nQuestion: {question.get('question', '')}\n"
            f"{answer_lines}\n---"
        )

    return "\n\n".join(blocks)


def build_full_context(
    records: List[Dict],
    questions: Optional[List[Dict]] = None,
) -> str:

    parts = [
        build_college_context(records),
        build_community_context(questions or []),
    ]

    return "\n\n".join(p for p in parts if p)


def build_chat_prompt(
    message: str,
    records: List[Dict],
    questions: Optional[List[Dict]] = None,
) -> str:

    return college_assistant_prompt(
        context=build_full_context(records, questions),
        message=message,
    )


def build_document_prompt(content: str, file_type: str, file_name: str) -> str:

    return DOCUMENT_PROCESSING_PROMPT.format(
        file_name=file_name,
        file_type=file_type,
        content=content,
    )
