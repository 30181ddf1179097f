"""HTTP surface of PropTrail (FastAPI application factory and routers)."""
