"""Top‑level package for the Finance Tracker.

The primary modules are:

* ``aggregator`` – dashboard summary and six-month trend
* ``allocation`` – salary split across essentials, savings and lifestyle
* ``recurring`` – due-status policies and monthly normalization
* ``storage`` / ``db`` – in-memory and SQLite record stores
* ``service`` – validated operations used by the UI and scripts
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run finance_tracker/dashboard.py
```

The Streamlit app is not imported here so the package works without a
browser session (e.g. during unit testing).
"""

from . import aggregator  # noqa: F401  # re-exported for convenience
from . import allocation  # noqa: F401  # re-exported for convenience
from . import recurring  # noqa: F401  # re-exported for convenience
from .service import FinanceService  # noqa: F401
from .storage import MemoryRecordStore, RecordStore  # noqa: F401

__all__ = ["aggregator", "allocation", "recurring", "FinanceService", "MemoryRecordStore", "RecordStore"]

__version__ = "0.1.0"
