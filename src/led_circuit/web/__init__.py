"""HTTP control surface (FastAPI) for a replay session."""
