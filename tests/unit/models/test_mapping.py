"""Tests for mapping and exclusion models."""

import pytest
from flipsd.models.mapping import (
    DEFAULT_CATEGORY,
    DEFAULT_EXCLUDES,
    DEFAULT_MAPPINGS,
    ExclusionSet,
    MappingEntry,
    MappingOrigin,
    ResolvedMapping,
)


class TestMappingEntry:
    """Tests for MappingEntry."""

    def test_destination_is_category_playground(self) -> None:
        """Destination is always <category>/playground."""
        entry = MappingEntry("BadUSB", "badusb")
        assert entry.destination == "badusb/playground"

    @pytest.mark.parametrize("bad", ["", "a/b", ".", ".."])
    def test_rejects_invalid_category(self, bad: str) -> None:
        """Category must be a single directory name."""
        with pytest.raises(ValueError, match="category"):
            MappingEntry("BadUSB", bad)

    def test_rejects_invalid_source(self) -> None:
        """Source must be a single directory name."""
        with pytest.raises(ValueError, match="source"):
            MappingEntry("BadUSB/Windows", "badusb")

    def test_is_frozen(self) -> None:
        """MappingEntry is immutable."""
        entry = MappingEntry("NFC", "nfc")
        with pytest.raises(AttributeError):
            entry.category = "rfid"  # type: ignore[misc]

    def test_default_table(self) -> None:
        """The default table routes graphics and the toolbox to the catch-all."""
        by_source = {m.source: m.category for m in DEFAULT_MAPPINGS}
        assert by_source["Sub-GHz"] == "subghz"
        assert by_source["Graphics"] == DEFAULT_CATEGORY
        assert by_source["flipper_toolbox"] == DEFAULT_CATEGORY
        assert len(DEFAULT_MAPPINGS) == 10


class TestResolvedMapping:
    """Tests for ResolvedMapping."""

    def test_is_discovered(self) -> None:
        """is_discovered reflects the origin."""
        static = ResolvedMapping("NFC", "nfc", "nfc/playground", MappingOrigin.STATIC)
        found = ResolvedMapping(
            "New", "apps_data", "apps_data/playground/New", MappingOrigin.DISCOVERED
        )
        assert static.is_discovered is False
        assert found.is_discovered is True


class TestExclusionSet:
    """Tests for ExclusionSet."""

    def test_default_patterns(self) -> None:
        """Defaults cover VCS, Finder metadata and audio."""
        assert ExclusionSet().patterns == DEFAULT_EXCLUDES

    @pytest.mark.parametrize(
        "name",
        [".git", ".DS_Store", "song.wav", "SONG.WAV", "a.mp3", "B.MP3", "Wav_Player"],
    )
    def test_matches_excluded_names(self, name: str) -> None:
        """Excluded names match."""
        assert ExclusionSet().matches(name) is True

    @pytest.mark.parametrize("name", ["payload.txt", "door.sub", "song.Wav", "wav_player"])
    def test_does_not_match_other_names(self, name: str) -> None:
        """Matching is case-sensitive and limited to the patterns."""
        assert ExclusionSet().matches(name) is False

    def test_rsync_args(self) -> None:
        """Patterns render as --exclude options in order."""
        exclusions = ExclusionSet((".git", "*.wav"))
        assert exclusions.rsync_args() == ["--exclude=.git", "--exclude=*.wav"]
