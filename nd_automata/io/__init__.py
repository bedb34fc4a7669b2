"""Arrow schemas for persisted artifacts."""
