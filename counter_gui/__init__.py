"""Counter GUI: PySide6 client, backend API client and counter controller."""
