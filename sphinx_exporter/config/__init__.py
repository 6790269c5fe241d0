"""Runtime configuration (CLI flags, environment, .env overlay)."""
