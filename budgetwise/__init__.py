"""Top-level package for the BudgetWise dashboard.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``analytics`` – derived metrics, advice, and forecast series
* ``api_client`` – the HTTP client for the BudgetWise REST backend
* ``visualization`` – functions that generate Plotly figures

To run the dashboard from the command line you can execute:

```bash
streamlit run budgetwise/Home.py
```

or use ``run_dashboard.py`` at the project root.
"""

from . import analytics  # noqa: F401  # re-exported for convenience
from . import api_client  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience

__all__ = ["analytics", "api_client", "visualization"]
