"""Counter backend: SQLite counter store, FastAPI routes and process metrics."""
