"""Back up the on-device store.

Copies the JSON file named by LOCAL_STORE_PATH into backups/ with a
timestamp. Remote data is backed up with the provider's own tooling.
"""

from __future__ import annotations

import importlib
import shutil
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    store_path = Path(getattr(settings, "LOCAL_STORE_PATH", "") or "")
    if not store_path.name:
        raise SystemExit("LOCAL_STORE_PATH is empty: nothing to back up (in-memory store).")
    if not store_path.is_absolute():
        store_path = REPO_ROOT / store_path
    if not store_path.exists():
        raise SystemExit(f"Local store not found: {store_path}")

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"mediguard_store_{ts}.json"
    shutil.copy2(store_path, out_file)
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
