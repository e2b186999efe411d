from __future__ import annotations

import os
import sys
from pathlib import Path

os.environ.setdefault("HASHGEN_LOG_TO_FILE", "0")

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
