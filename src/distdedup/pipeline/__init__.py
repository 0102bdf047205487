"""Pipeline stages for distributed duplicate detection."""
