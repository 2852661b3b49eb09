from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["searchQuery"]
OPTIONAL_STR_FIELDS = [
    "company",
    "email",
]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_scrape_request(data: Any) -> List[str]:
    """
    Returns a list of validation error messages for a POST /scrape body.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Request body must be a JSON object"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if not _is_non_empty_str(data.get(f)):
            errors.append(f"{f} is required")

    # Optional strings: null allowed, otherwise must be strings
    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    contact_id = data.get("contactId")
    if contact_id is not None and not isinstance(contact_id, (str, int)):
        errors.append("Field 'contactId' must be a string or number if provided")

    email = data.get("email")
    if _is_non_empty_str(email) and "@" not in email:
        errors.append("Field 'email' must be an email address")

    return errors
