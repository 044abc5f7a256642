# campus_buddy/config.py
"""
Configuration for the Campus Buddy helpdesk.

This file centralizes all tunable parameters for chat, document
processing and the SyncSpot fallback. Secrets and endpoints come from
the environment; everything else is a plain constant.
"""

import os


# ========== BACKEND (SUPABASE) ==========

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# Table names
PROFILES_TABLE = "profiles"
COLLEGE_DATA_TABLE = "college_data"
SYNCSPOT_QUESTIONS_TABLE = "syncspot_questions"
SYNCSPOT_ANSWERS_TABLE = "syncspot_answers"

# Storage bucket for faculty uploads
DOCUMENTS_BUCKET = "college-documents"


# ========== CHAT (ai-chat) ==========

# Primary provider
MISTRAL_BASE_URL = "https://api.mistral.ai/v1"
MISTRAL_CHAT_MODEL = "mistral-large-latest"
MISTRAL_CHAT_TEMPERATURE = 0.7
MISTRAL_CHAT_MAX_TOKENS = 1024

# Fallback provider
GEMINI_CHAT_MODEL = "gemini-1.5-flash-latest"
GEMINI_GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 1024,
}

# The model answers with this prefix when the knowledge base has nothing
NO_INFO_SENTINEL = "NO_INFO_AVAILABLE:"

MAX_MESSAGE_LENGTH = 2000


# ========== DOCUMENT PROCESSING (process-document) ==========

MISTRAL_DOCUMENT_MODEL = "mistral-large-latest"
MISTRAL_VISION_MODEL = "pixtral-large-latest"
DOCUMENT_TEMPERATURE = 0.1
DOCUMENT_MAX_TOKENS = 4000

# File upload limits
MAX_FILE_SIZE_MB = 10
ALLOWED_FILE_EXTENSIONS = [
    ".txt", ".pdf",
    ".docx", ".doc",
    ".xlsx", ".xls",
    ".pptx", ".ppt",
    ".png", ".jpg", ".jpeg", ".webp", ".gif",
]

# Upper bound on locally extracted text sent for structuring
MAX_DOCUMENT_CHARACTERS = 60000


# ========== FACULTY DASHBOARD ==========

CATEGORIES = [
    "Departments",
    "Faculty",
    "Labs",
    "Events",
    "Facilities",
    "Contact Information",
    "Academic Programs",
    "Library",
    "Other",
]

# Bootstrap faculty account (create-faculty)
FACULTY_EMAIL = os.getenv("FACULTY_EMAIL", "keystone")
FACULTY_PASSWORD = os.getenv("FACULTY_PASSWORD", "keystone")
FACULTY_FULL_NAME = "Faculty Admin"


# ========== UI ==========

API_BASE = os.getenv("CAMPUS_BUDDY_API", "http://127.0.0.1:8000")
