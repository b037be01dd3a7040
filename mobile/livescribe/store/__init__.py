"""Settings and transcript models."""
