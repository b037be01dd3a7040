"""Transport, session control and logging."""
