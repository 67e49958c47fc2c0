from __future__ import annotations

from typing import Final

PAGES_PER_SHEET: Final[int] = 4

# A4 portrait in points, the reference size for plans requested without a document.
FALLBACK_PAGE_SIZE: Final[tuple[float, float]] = (595.2756, 841.8898)

OUTPUT_FILENAME_PREFIX: Final[str] = "booklet_"
PDF_MEDIA_TYPE: Final[str] = "application/pdf"
DEFAULT_MAX_UPLOAD_BYTES: Final[int] = 100 * 1024 * 1024
MAX_PLAN_PAGES: Final[int] = 10_000
