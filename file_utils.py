import re
import sys
from pathlib import Path
from typing import List

# Bundled data (config.ini, schemas/, rule_profiles/) sits beside the modules in
# a checkout and under <prefix>/share/trade-journal-analytics once installed.
DATA_DIRS = (
    Path(__file__).resolve().parent,
    Path(sys.prefix) / "share" / "trade-journal-analytics",
)


def data_path(*parts) -> Path:
    """First existing location of a bundled data file or directory, else the checkout path."""
    for base in DATA_DIRS:
        candidate = base.joinpath(*parts)
        if candidate.exists():
            return candidate
    return DATA_DIRS[0].joinpath(*parts)


def list_exports(directory, pattern) -> List[Path]:
    """Export files in a directory whose names match pattern, newest first."""
    folder = Path(directory)
    if not folder.is_dir():
        return []
    matches = [p for p in folder.iterdir() if p.is_file() and re.match(pattern, p.name)]
    matches.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return matches
