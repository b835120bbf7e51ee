"""Tests for track models."""

import pytest

from playdeck.domain.library.models import Track, track_from_dict, track_key, track_to_dict


class TestTrackFromDict:
    """Tests for track_from_dict."""

    def test_full_record(self) -> None:
        track = track_from_dict(
            {
                "id": "t1",
                "title": "Song",
                "author": "Band",
                "src": "http://cdn/t1.mp3",
                "album": "LP",
                "cover": "http://cdn/t1.jpg",
                "type": "audio/mpeg",
            }
        )
        assert track == Track("t1", "Song", "Band", "http://cdn/t1.mp3", "LP", "http://cdn/t1.jpg", "audio/mpeg")

    def test_defaults_for_missing_title_and_author(self) -> None:
        track = track_from_dict({"id": 5, "src": "/music/5.mp3"})
        assert track.id == "5"
        assert track.title == "5"
        assert track.author == "Unknown Artist"

    @pytest.mark.parametrize("record", [{"src": "x"}, {"id": "x"}, {"id": "", "src": "x"}, "x"])
    def test_invalid_records(self, record) -> None:
        with pytest.raises(ValueError):
            track_from_dict(record)


class TestTrackHelpers:
    def test_to_dict_drops_unset_fields(self, track_a: Track) -> None:
        assert track_to_dict(track_a) == {
            "id": "a",
            "title": "Alpha",
            "author": "Artist One",
            "src": "/music/a.mp3",
        }

    def test_track_key(self, track_a: Track) -> None:
        assert track_key(track_a) == ("a", "/music/a.mp3")
        assert track_key(None) is None
