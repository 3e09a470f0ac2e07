"""
JSON schemas sent to the completion service for structured extraction.

Specs are wrapped as {'name', 'strict', 'schema'}; see _unwrap_schema_spec in
core.llm.openai_service.
"""

_NULLABLE_STRING = {"type": ["string", "null"]}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

EXPERIENCE_ENTRY_SCHEMA = {
    "type": "object",
    "properties": {
        "company": {"type": "string"},
        "title": {"type": "string"},
        "startDate": {
            "type": ["string", "null"],
            "description": "YYYY-MM or YYYY",
        },
        "endDate": {
            "type": ["string", "null"],
            "description": "YYYY-MM, YYYY or 'Present'",
        },
        "responsibilities": {"type": "string"},
    },
    "required": ["company", "title", "startDate", "endDate", "responsibilities"],
    "additionalProperties": False,
}

CANDIDATE_PROFILE_SCHEMA = {
    "name": "candidate_profile",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "fullName": {"type": "string"},
            "currentTitle": {"type": "string"},
            "email": _NULLABLE_STRING,
            "phone": _NULLABLE_STRING,
            "location": _NULLABLE_STRING,
            "yearsOfExperience": {"type": ["number", "null"]},
            "skills": _STRING_LIST,
            "experience": {"type": "array", "items": EXPERIENCE_ENTRY_SCHEMA},
            "education": _STRING_LIST,
            "certifications": _STRING_LIST,
            "languages": _STRING_LIST,
            "summary": {"type": "string"},
        },
        "required": [
            "fullName", "currentTitle", "email", "phone", "location",
            "yearsOfExperience", "skills", "experience", "education",
            "certifications", "languages", "summary",
        ],
        "additionalProperties": False,
    },
}
