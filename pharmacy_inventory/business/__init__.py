"""Client-side business rules (no persistence; the backend owns the data)."""
