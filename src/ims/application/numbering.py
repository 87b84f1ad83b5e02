"""Human-facing document numbers such as ``GRN-2026-00042``."""

from __future__ import annotations

from ims.domain.model.clock import utcnow
from ims.domain.repository.document_repository import DocumentRepository


def next_document_number(prefix: str, repo: DocumentRepository) -> str:
    """Number the next document in *repo*.

    Unique only while the caller holds ``repo.locked()`` until the new
    document is saved.
    """
    year = utcnow().year
    return f"{prefix}-{year}-{repo.count() + 1:05d}"
