"""HTTP surface for the caption engine (FastAPI)."""
