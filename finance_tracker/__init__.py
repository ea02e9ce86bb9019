"""Top-level package for the personal finance tracker.

The primary modules are:

* ``aggregation`` – totals, period windows, monthly series and recent activity
* ``budget_health`` – budget progress and the dashboard budget status
* ``db`` – the SQLite record store for users, expenses, incomes and budgets
* ``api`` – the Flask JSON API
* ``visualization`` – functions that generate Plotly figures

To run the Streamlit app from the command line you can execute:

```bash
python run_dashboard.py
```

and the JSON API with ``python -m finance_tracker.api``.
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import budget_health  # noqa: F401  # re-exported for convenience

__all__ = ["aggregation", "budget_health"]
