from __future__ import annotations

from typing import Optional

# Chromatic scale starting at A; sharps carry an "S" suffix on the device.
NOTE_NAMES = ["A", "AS", "B", "C", "CS", "D", "DS", "E", "F", "FS", "G", "GS"]

REST = "Rest"

# Pitch classes are counted from MIDI 21 (an A); octave numbers from MIDI 24 (C0).
PITCH_ORIGIN = 21
OCTAVE_ORIGIN = 24


def midi_to_clara_name(midi_number: int) -> str:
    """Map a MIDI note number to a C.L.A.R.A note name.

    Octave numbers roll over at C: 59 -> 'B2', 60 -> 'C3', 61 -> 'CS3',
    69 -> 'A3'. The A just below C0 is 21 -> 'A-1'. Python's ``%`` and ``//``
    floor towards negative infinity, so notes below the origin still get a
    valid pitch class.
    """
    n = int(midi_number)
    return NOTE_NAMES[(n - PITCH_ORIGIN) % 12] + str((n - OCTAVE_ORIGIN) // 12)


def clara_name_to_midi(name: str) -> Optional[int]:
    """Parse a name like 'C3', 'CS3' or 'A-1' back to a MIDI number (0..127). Returns None if invalid."""
    if not isinstance(name, str) or len(name) < 2:
        return None
    pitch = name[:2] if name[:2] in NOTE_NAMES else name[:1]
    if pitch not in NOTE_NAMES:
        return None
    try:
        octave = int(name[len(pitch):])
    except ValueError:
        return None
    pc = NOTE_NAMES.index(pitch)
    # A, AS and B belong to the octave of the C below them
    semitone = pc - 3 if pc >= 3 else pc + 9
    midi = OCTAVE_ORIGIN + 12 * octave + semitone
    if not (0 <= midi <= 127) or midi_to_clara_name(midi) != name:
        return None
    return midi
