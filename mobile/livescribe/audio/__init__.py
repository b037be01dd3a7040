"""Microphone capture and chunk assembly."""
