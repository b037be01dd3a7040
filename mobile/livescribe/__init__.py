"""LiveScribe: stream microphone audio to a transcription service."""

__version__ = "0.1.0"
