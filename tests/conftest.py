import sys
from pathlib import Path

# Ensure `src` (containing `yarn2mcp`) is on sys.path for tests when not installed editable.
SRC = Path(__file__).resolve().parent.parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
