"""Top-level package for the receipt points service.

This package contains everything required to run the FastAPI backend
that scores purchase receipts: configuration and database plumbing,
Pydantic schemas and SQLAlchemy tables, the validation, scoring and
duplicate-detection services, the receipt stores and the API routers.

To run the API locally you can execute:

```bash
uvicorn receipt_points.api.main:app --reload
```

The default configuration keeps receipts in memory.  Set
``STORE_BACKEND=database`` to persist them in the database named by
``DATABASE_URL`` (a local SQLite file by default).
"""

__all__: list[str] = []
