# opsbilling/logging_filters.py
import logging
import re
from typing import Any, Mapping

REDACTION = "****"

# Worker identity documents and credentials never reach log sinks
SENSITIVE_KEYS = {
    "password", "token", "authorization", "secret",
    "dni", "document", "email", "phone",
}

_email_re = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_token_like_re = re.compile(r"(?:Bearer\s+)?[A-Za-z0-9\-_]{24,}")


def _scrub_text(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, bool)):
        return value
    text = _email_re.sub(r"***@\2", str(value))
    return _token_like_re.sub(REDACTION, text)


def scrub(value: Any) -> Any:
    """Recursively redact sensitive keys and token-like strings."""
    if isinstance(value, Mapping):
        return {
            key: REDACTION
            if isinstance(key, str) and key.lower() in SENSITIVE_KEYS
            else scrub(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return type(value)(scrub(item) for item in value)
    return _scrub_text(value)


class PIIRedactorFilter(logging.Filter):
    """Redact worker PII from log records (message, args and extra dicts)."""

    EXTRA_FIELDS = ("workers", "payload", "details")

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _scrub_text(record.msg)

        if record.args:
            if isinstance(record.args, Mapping):
                record.args = scrub(record.args)
            else:
                record.args = tuple(scrub(arg) for arg in record.args)

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                setattr(record, field, scrub(getattr(record, field)))
        return True
