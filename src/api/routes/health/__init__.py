"""Health check e readiness."""
