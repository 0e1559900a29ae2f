"""HTTP layer: FastAPI dependencies, schemas and routes."""
