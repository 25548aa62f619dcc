"""Core domain layer: exceptions and the ingestion pipeline."""
