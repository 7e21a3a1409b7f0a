"""Static governance checks for Alembic revision files.

Usage:
    python scripts/check_migration_chain.py

Checks:
- every revision id is unique
- every down_revision exists (except root)
- there is exactly one head revision
- append-only tables (the forecast log) never gain a unique constraint
"""

from __future__ import annotations

import re
import sys
from pathlib import Path


REVISION_RE = re.compile(r'^revision\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)
DOWN_RE = re.compile(r'^down_revision\s*=\s*(.+)$', re.MULTILINE)

APPEND_ONLY_TABLES = {"production_forecasts"}
DEFAULT_VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _extract_scalar(raw: str) -> str | None:
    raw = raw.strip()
    if raw in {"None", ""}:
        return None
    if raw.startswith(("'", '"')) and raw.endswith(("'", '"')):
        return raw[1:-1]
    return None


def _unique_on_append_only(text: str) -> list[str]:
    hits = []
    for table in APPEND_ONLY_TABLES:
        for match in re.finditer(rf'create_table\(\s*["\']{table}["\'](.*?)\n    \)', text, re.DOTALL):
            if "UniqueConstraint" in match.group(1):
                hits.append(table)
        if re.search(rf'create_unique_constraint\([^)]*["\']{table}["\']', text):
            hits.append(table)
        if re.search(rf'create_index\([^)]*["\']{table}["\'][^)]*unique\s*=\s*True', text, re.DOTALL):
            hits.append(table)
    return sorted(set(hits))


def check_chain(versions_dir: Path = DEFAULT_VERSIONS_DIR) -> tuple[list[str], list[str]]:
    """Return (errors, heads) for the revision files in `versions_dir`."""
    files = sorted(versions_dir.glob("*.py"))

    revisions: dict[str, Path] = {}
    down_map: dict[str, str | None] = {}
    errors: list[str] = []

    for file in files:
        text = file.read_text(encoding="utf-8")
        rev_m = REVISION_RE.search(text)
        down_m = DOWN_RE.search(text)

        if not rev_m:
            errors.append(f"{file.name}: missing revision")
            continue

        rev = rev_m.group(1)
        if rev in revisions:
            errors.append(f"Duplicate revision id {rev} in {file.name} and {revisions[rev].name}")
        revisions[rev] = file

        down_map[rev] = _extract_scalar(down_m.group(1)) if down_m else None

        for table in _unique_on_append_only(text):
            errors.append(f"{file.name}: unique constraint on append-only table {table}")

    for rev, down in down_map.items():
        if down is not None and down not in revisions:
            errors.append(f"Revision {rev} references missing down_revision {down}")

    referenced = {d for d in down_map.values() if d is not None}
    heads = [r for r in revisions if r not in referenced]
    if len(heads) != 1:
        errors.append(f"Expected exactly one head revision, found {len(heads)} ({heads})")

    return errors, heads


def main() -> int:
    errors, heads = check_chain()

    print("Migration chain check")
    print(f"- heads: {heads}")

    if errors:
        for err in errors:
            print(f"[FAIL] {err}")
        return 1

    print(f"[PASS] single head: {heads[0]}")
    print("[PASS] revision/down_revision integrity checks")
    print("[PASS] append-only tables carry no unique constraints")
    return 0


if __name__ == "__main__":
    sys.exit(main())
