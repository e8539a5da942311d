import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

# The guard modules live in src/ as top-level modules, not a package.
if str(SRC_DIR) not in sys.path:
  sys.path.insert(0, str(SRC_DIR))
