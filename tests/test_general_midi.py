"""Tests for General MIDI names."""

from midimsg.general_midi import (
    GMPercussionMap,
    GMSoundSet,
    get_percussion_name,
    get_voice_category,
    get_voice_name,
)


class TestGeneralMidi:
    """Test cases for program and percussion lookups."""

    def test_voice_names(self):
        """Programs map to GM instrument names."""
        assert get_voice_name(0) == "Acoustic Grand Piano"
        assert get_voice_name(40) == "Violin"
        assert get_voice_name(200) == "Program 200"

    def test_drum_channel(self):
        """Channel 10 programs select drum kits."""
        assert get_voice_name(0, channel=10) == "Standard Kit"
        assert get_voice_name(8, channel=10) == "Drum Kit 8"

    def test_categories(self):
        """Every eight programs form a family."""
        assert get_voice_category(0) == "Piano"
        assert get_voice_category(12) == "Chromatic Percussion"
        assert get_voice_category(-1) == "Unknown"

    def test_percussion(self):
        """Percussion notes 35-81 have names."""
        assert get_percussion_name(38) == "Acoustic Snare"
        assert get_percussion_name(20) is None

    def test_enums(self):
        """Sound set and percussion map enums use the same numbers."""
        assert GMSoundSet.VIOLIN == 40
        assert GMSoundSet.GUNSHOT == 127
        assert GMPercussionMap.ACOUSTIC_BASS_DRUM == 35
