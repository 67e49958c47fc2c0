from bookletmaker.imposition.assembler import (
    BookletJobResult,
    DocumentProvider,
    PipelineState,
    assemble,
    run_booklet_job,
)
from bookletmaker.imposition.core import (
    Blank,
    CopySource,
    ImposedSide,
    NormalizedCount,
    OutputPlan,
    PlacementEntry,
    impose_booklet,
    normalize_page_count,
    resolve_placements,
    sheet_order,
)
from bookletmaker.imposition.errors import AssemblyFailure, BookletError, InvalidDocument

__all__ = [
    "AssemblyFailure",
    "Blank",
    "BookletError",
    "BookletJobResult",
    "CopySource",
    "DocumentProvider",
    "ImposedSide",
    "InvalidDocument",
    "NormalizedCount",
    "OutputPlan",
    "PipelineState",
    "PlacementEntry",
    "assemble",
    "impose_booklet",
    "normalize_page_count",
    "resolve_placements",
    "run_booklet_job",
    "sheet_order",
]
