"""HTTP API: application factory, dependencies and health routes."""
