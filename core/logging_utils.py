"""
Utilities for safe logging with automatic PII data masking
"""

import re
from hashlib import blake2b
from typing import Any, Dict, Union


def mask_document(dni: str) -> str:
    """
    Masks a worker identity document for safe logging

    Args:
        dni: Identity document number

    Returns:
        Masked document (e.g., ****6789)
    """
    if not dni:
        return "[no_document]"

    digits = re.sub(r"\W", "", str(dni))
    if len(digits) <= 4:
        return "****"
    return f"****{digits[-4:]}"


def hash_id(value: Union[int, str]) -> str:
    """Short stable hash for identifiers that should not appear in clear"""
    h = blake2b(digest_size=6)
    h.update(str(value).encode("utf-8"))
    return h.hexdigest()


def safe_log_worker(worker, action: str = "action") -> Dict[str, Any]:
    """
    Build an `extra` dict describing a worker without exposing PII

    Accepts a Worker model instance or a worker dict from a group summary.
    """
    if worker is None:
        return {"action": action, "worker": None}

    if isinstance(worker, dict):
        worker_id = worker.get("id")
        dni = worker.get("dni")
    else:
        worker_id = getattr(worker, "pk", None)
        dni = getattr(worker, "dni", None)

    return {
        "action": action,
        "worker_hash": hash_id(worker_id) if worker_id is not None else None,
        "document": mask_document(dni) if dni else None,
    }


def err_tag(exc: BaseException) -> str:
    """
    Extract safe error tag from exception for logging

    Args:
        exc: Exception instance

    Returns:
        Safe error tag with sanitized message content
    """
    for attr in ("safe_message", "message"):
        msg = getattr(exc, attr, None)
        if isinstance(msg, str) and msg:
            return msg[:120]

    text = str(exc)
    text = re.sub(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", "***@***", text)
    text = re.sub(r"\b(?:Bearer\s+)?[A-Za-z0-9._-]{24,}\b", "****", text)

    return text[:120] if text.strip() else exc.__class__.__name__
