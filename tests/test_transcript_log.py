import dataclasses

import pytest

from mobile.livescribe.store.transcript_log import TranscriptLog


def test_append_preserves_arrival_order_and_indexes():
    transcript = TranscriptLog()
    for text in ["hello", "world", "hello"]:
        transcript.append(text)
    assert transcript.texts() == ["hello", "world", "hello"]
    assert [entry.index for entry in transcript] == [0, 1, 2]
    assert len(transcript) == 3
    assert transcript.text(" ") == "hello world hello"


def test_entries_are_immutable_snapshots():
    transcript = TranscriptLog()
    entry = transcript.append("first")
    snapshot = transcript.entries()
    transcript.append("second")

    assert snapshot == (entry,)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.text = "edited"


def test_empty_fragments_are_kept():
    transcript = TranscriptLog()
    transcript.append("")
    transcript.append("a")
    assert transcript.texts() == ["", "a"]


def test_subscribers_see_each_new_entry():
    transcript = TranscriptLog()
    seen = []
    transcript.subscribe(seen.append)
    transcript.append("one")
    transcript.append("two")
    assert [entry.text for entry in seen] == ["one", "two"]
    assert seen[0].received_at <= seen[1].received_at
