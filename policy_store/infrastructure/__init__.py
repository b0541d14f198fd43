"""Infrastructure layer: MongoDB persistence, logging, error types."""
