"""
quote_wizard/catalog.py
Fixed option sets offered by the quote wizard.
"""
from __future__ import annotations

SERVICES: dict[str, str] = {
    "kitchen": "Kitchen Remodeling",
    "bathroom": "Bathroom Renovation",
    "roofing": "Roofing Services",
    "electrical": "Electrical Work",
    "plumbing": "Plumbing Services",
    "repairs": "General Repairs",
    "painting": "Painting",
    "flooring": "Flooring",
    "other": "Other / Not Sure",
}

URGENCY_OPTIONS: dict[str, str] = {
    "emergency": "Emergency (24-48 hours)",
    "urgent": "Urgent (within a week)",
    "normal": "Normal (flexible timing)",
    "planning": "Planning (just getting estimates)",
}

PROJECT_SIZES: dict[str, str] = {
    "small": "Small",
    "medium": "Medium",
    "large": "Large",
    "major": "Major renovation",
    "unsure": "Not sure",
}

TIMELINES: dict[str, str] = {
    "asap": "As soon as possible",
    "2weeks": "Within 2 weeks",
    "1month": "Within 1 month",
    "3months": "Within 3 months",
    "planning": "Just planning",
}

CONTACT_METHODS: dict[str, str] = {
    "phone": "Phone call",
    "text": "Text message",
    "email": "Email",
    "any": "Any method",
}

# Upload limits for step 3
MAX_FILES = 10
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ACCEPTED_FORMATS = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".heic": "image/heic",
}

# Compression targets
MAX_DIMENSION = 1920
JPEG_QUALITY = 80
TARGET_BYTES = 1024 * 1024
