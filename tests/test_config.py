from mobile.livescribe.config import AppConfig


def test_defaults_describe_fixed_pcm_encoding(monkeypatch):
    for name in ("LIVESCRIBE_SAMPLE_RATE", "LIVESCRIBE_CHUNK_MS", "LIVESCRIBE_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    config = AppConfig()
    assert config.sample_rate == 16000
    assert config.channels == 1
    assert config.content_type == "audio/L16"
    assert config.bytes_per_second == 32000
    assert config.frames_per_chunk == 4000
    assert config.default_endpoint == "ws://127.0.0.1:3000/audio"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LIVESCRIBE_SAMPLE_RATE", "8000")
    monkeypatch.setenv("LIVESCRIBE_CHUNK_MS", "100")
    monkeypatch.setenv("LIVESCRIBE_ENDPOINT", "wss://asr.example.com/live")
    config = AppConfig()
    assert config.frames_per_chunk == 800
    assert config.default_endpoint == "wss://asr.example.com/live"


def test_malformed_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("LIVESCRIBE_CHUNK_MS", "quarter-second")
    assert AppConfig().chunk_ms == 250
