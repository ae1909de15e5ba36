"""Top‑level package for the expense dashboard.

A Streamlit app for logging expenses against a hosted store and reviewing
them by period. The primary modules are:

* ``rest_client`` and ``auth`` – the store's REST and token endpoints
* ``db`` – expense, category and budget queries for one owner
* ``analytics`` – pandas aggregations for the overview page
* ``periods`` – year/month selection and stepping
* ``visualization`` – functions that generate Plotly figures

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_dashboard/Home.py
```

or use ``run_dashboard.py`` in the project root.
"""

from . import analytics  # noqa: F401  # re-exported for convenience
from . import periods  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience

__all__ = ["analytics", "periods", "visualization"]
