"""Application assembly and startup tasks."""
