import sys
from pathlib import Path

# Add the project root to sys.path so launchpad_server imports resolve
project_root = Path(__file__).parent.parent
if str(project_root.absolute()) not in sys.path:
    sys.path.insert(0, str(project_root.absolute()))

from launchpad_server.app import app
