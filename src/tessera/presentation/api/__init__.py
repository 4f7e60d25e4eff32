"""HTTP adapter for the authentication service (FastAPI)."""
