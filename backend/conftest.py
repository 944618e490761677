"""Root pytest configuration (kept intentionally minimal).

The application package resides in the nested `receipt_points/` directory.
Because the pytest rootdir may be the repository root, the backend
directory is put on `sys.path` so `import receipt_points` works without an
editable install.
"""

from __future__ import annotations

import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))
