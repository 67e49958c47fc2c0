from __future__ import annotations

import importlib
import sys
from pathlib import Path

# Ensure pytest resolves the package from the active checkout
# instead of a stale editable install target.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


def _ensure_module_from_root(module_name: str, root: Path) -> None:
    module = importlib.import_module(module_name)
    module_file = getattr(module, "__file__", None)
    if module_file is None:
        raise RuntimeError(f"Unable to verify import path for '{module_name}' (no __file__).")

    module_path = Path(module_file).resolve()
    if root not in module_path.parents:
        raise RuntimeError(
            "Detected a stale editable package mapping. "
            f"Expected '{module_name}' under '{root}', got '{module_path}'. "
            "Remediation: run `python -m pip install -e '.[dev]'` from this checkout "
            "and re-run pytest."
        )


def pytest_sessionstart(session) -> None:  # type: ignore[no-untyped-def]
    _ensure_module_from_root("bookletmaker", ROOT)
    _ensure_module_from_root("bookletmaker.web.app", ROOT)
