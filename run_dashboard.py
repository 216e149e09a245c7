#!/usr/bin/env python3
"""Direct launcher for the Finance Tracker dashboard.

This script launches Streamlit on ``finance_tracker/dashboard.py`` with the
project root on the import path.  Set ``FINTRACK_STORE=sqlite`` to keep
records between runs.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
dashboard_app = project_root / "finance_tracker" / "dashboard.py"

if __name__ == "__main__":
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    raise SystemExit(subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(dashboard_app)],
        cwd=str(project_root),
        env=env,
    ).returncode)
