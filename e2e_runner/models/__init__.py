"""Data model of the e2e runner."""
