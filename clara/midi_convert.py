from __future__ import annotations

import argparse
import io
import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import mido

from clara.lighting_config import ERROR_MUSIC, ConfigDefaults, format_config, load_base_config
from clara.note_names import REST, midi_to_clara_name


NOTE_ON = "note_on"
NOTE_OFF = "note_off"
OTHER = "other"

# Gaps between a note-off and the next note-on longer than this become rests.
REST_THRESHOLD_TICKS = 50


class MalformedTrackError(ValueError):
    pass


@dataclass(frozen=True)
class MidiEvent:
    type: str
    note_number: Optional[int] = None
    velocity: int = 0
    delta_time: int = 0


def _to_event(msg) -> MidiEvent:
    delta = int(getattr(msg, "time", 0) or 0)
    if msg.type == "note_on" and msg.velocity > 0:
        return MidiEvent(NOTE_ON, int(msg.note), int(msg.velocity), delta)
    if msg.type in ("note_on", "note_off"):
        # note_on with velocity 0 is the running-status form of note_off
        return MidiEvent(NOTE_OFF, int(msg.note), int(msg.velocity), delta)
    return MidiEvent(OTHER, None, 0, delta)


def read_first_track(midi_bytes: bytes) -> List[MidiEvent]:
    """Decode a Standard MIDI File and return the events of its first track.

    Raises whatever mido raises for bytes that are not a MIDI file
    (OSError, EOFError, ValueError, ...). A file without tracks yields [].
    """
    mid = mido.MidiFile(file=io.BytesIO(bytes(midi_bytes)))
    if not mid.tracks:
        return []
    return [_to_event(msg) for msg in mid.tracks[0]]


def build_music(events: Iterable[MidiEvent], rest_threshold: int = REST_THRESHOLD_TICKS, strict: bool = False) -> List[Dict[str, Any]]:
    """Pair note-on/note-off events into a monophonic song of notes and rests.

    - Times are accumulated from ``delta_time`` in ticks.
    - A rest is inserted before a note-on when the silence since the last
      note-off is longer than ``rest_threshold`` ticks.
    - A note-off with no open note is skipped, or raises MalformedTrackError
      when ``strict`` is set.
    """
    open_notes: Dict[int, Dict[str, int]] = {}
    song: List[Dict[str, Any]] = []
    current_time = 0
    last_off_time: Optional[int] = None

    for ev in events:
        current_time += ev.delta_time or 0
        if ev.type == NOTE_ON:
            if last_off_time is not None and current_time - last_off_time > rest_threshold:
                song.append({"note": REST, "volume": 0, "duration": current_time - last_off_time})
            open_notes[ev.note_number] = {"velocity": ev.velocity, "noteTime": current_time}
        elif ev.type == NOTE_OFF:
            on = open_notes.pop(ev.note_number, None)
            if on is None:
                if strict:
                    raise MalformedTrackError(f"note-off for note {ev.note_number} at tick {current_time} has no matching note-on")
                continue
            song.append({
                "note": midi_to_clara_name(ev.note_number),
                "volume": on["velocity"],
                "duration": current_time - on["noteTime"],
            })
            last_off_time = current_time

    return song


def midi_to_config(
    midi_bytes: bytes,
    existing_config: Optional[str] = None,
    *,
    defaults: Optional[ConfigDefaults] = None,
    rest_threshold: int = REST_THRESHOLD_TICKS,
    strict: bool = False,
) -> Dict[str, Any]:
    config = load_base_config(existing_config, defaults)
    try:
        events = read_first_track(midi_bytes)
    except Exception:
        config["music"] = ERROR_MUSIC
        return config
    config["music"] = build_music(events, rest_threshold=rest_threshold, strict=strict)
    return config


def convert_midi_to_clara(
    midi_bytes: bytes,
    existing_config: Optional[str] = None,
    *,
    defaults: Optional[ConfigDefaults] = None,
    rest_threshold: int = REST_THRESHOLD_TICKS,
    strict: bool = False,
) -> str:
    """Return a C.L.A.R.A lighting config (JSON text) whose ``music`` comes from a MIDI file.

    If ``existing_config`` is valid JSON its other fields are kept and only
    ``music`` is replaced; otherwise a whole config is generated from
    ``defaults``. Only the first track is used and only one note sounds at a
    time.

    If the MIDI bytes cannot be parsed the returned config is NOT playable:
    its ``music`` is the ERROR_MUSIC string, for the caller to display.
    """
    config = midi_to_config(midi_bytes, existing_config, defaults=defaults, rest_threshold=rest_threshold, strict=strict)
    return format_config(config)


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Convert a MIDI file into the music of a C.L.A.R.A lighting config")
    ap.add_argument("midi", help="Path to a .mid file")
    ap.add_argument("--config", help="Existing lighting config JSON whose music is replaced")
    ap.add_argument("--out", "-o", help="Write the config here instead of stdout")
    ap.add_argument("--rest-threshold", type=int, default=REST_THRESHOLD_TICKS, help="Minimum silence in ticks that becomes a rest")
    ap.add_argument("--strict", action="store_true", help="Fail on note-off events without a note-on")
    args = ap.parse_args(argv)

    try:
        with open(args.midi, "rb") as f:
            data = f.read()
        existing = None
        if args.config:
            with open(args.config, "r", encoding="utf-8") as f:
                existing = f.read()
    except OSError as e:
        print(f"[convert] error: {e}", file=sys.stderr)
        return 2

    try:
        config = midi_to_config(data, existing, rest_threshold=args.rest_threshold, strict=args.strict)
    except MalformedTrackError as e:
        print(f"[convert] malformed track: {e}", file=sys.stderr)
        return 1

    text = format_config(config)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        print(f"[convert] wrote {args.out}")
    else:
        print(text)

    if config["music"] == ERROR_MUSIC:
        print(f"[convert] {ERROR_MUSIC}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
