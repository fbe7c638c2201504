from __future__ import annotations

import argparse
import json
import re
import sys
from typing import Any, Dict, List

from clara.lighting_config import ERROR_MUSIC
from clara.note_names import REST, clara_name_to_midi


COMMAND_TYPES = ("display", "shift", "clear", "delay")

# Device side packs repeat/offset into bytes and durations into 16 bits.
MAX_BYTE = 255
MAX_DURATION = 0xFFFF

LED_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _err(errors: List[str], path: str, msg: str) -> None:
    errors.append(f"{path}: {msg}")


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def validate_config(doc: Dict[str, Any]) -> List[str]:
    """Check a lighting config before it is stored or sent to a device.

    Returns a list of human-readable errors with JSON-pointer-like paths;
    an empty list means the config is usable.
    """
    errors: List[str] = []
    if not isinstance(doc, dict):
        _err(errors, "/", "config must be an object")
        return errors

    for key in ("id", "name"):
        if not isinstance(doc.get(key), str):
            _err(errors, f"/{key}", "required string")

    pattern_ids = set()
    patterns = doc.get("patterns")
    if not isinstance(patterns, list):
        _err(errors, "/patterns", "required array")
    else:
        for pi, pat in enumerate(patterns):
            ppath = f"/patterns/{pi}"
            if not isinstance(pat, dict):
                _err(errors, ppath, "must be object")
                continue
            pid = pat.get("id")
            if not isinstance(pid, str):
                _err(errors, ppath + "/id", "required string")
            elif pid in pattern_ids:
                _err(errors, ppath + "/id", f"duplicate pattern id '{pid}'")
            else:
                pattern_ids.add(pid)
            leds = pat.get("leds")
            if not isinstance(leds, list) or len(leds) == 0:
                _err(errors, ppath + "/leds", "required non-empty array")
            else:
                for li, led in enumerate(leds):
                    if not isinstance(led, str) or not LED_RE.match(led):
                        _err(errors, f"{ppath}/leds/{li}", "colour must be '#RRGGBB'")
            for key in ("repeat", "offset"):
                v = pat.get(key)
                if not _is_int(v) or not (0 <= v <= MAX_BYTE):
                    _err(errors, f"{ppath}/{key}", f"integer 0..{MAX_BYTE} required")

    commands = doc.get("commands")
    if not isinstance(commands, list):
        _err(errors, "/commands", "required array")
    else:
        for ci, cmd in enumerate(commands):
            cpath = f"/commands/{ci}"
            if not isinstance(cmd, dict):
                _err(errors, cpath, "must be object")
                continue
            kind = cmd.get("command")
            if kind not in COMMAND_TYPES:
                _err(errors, cpath + "/command", "must be 'display'|'shift'|'clear'|'delay'")
            elif kind == "display":
                pid = cmd.get("id")
                if not isinstance(pid, str):
                    _err(errors, cpath + "/id", "required string for display")
                elif isinstance(patterns, list) and pid not in pattern_ids:
                    _err(errors, cpath + "/id", f"unknown pattern '{pid}'")

    music = doc.get("music")
    if isinstance(music, str):
        detail = "" if music == ERROR_MUSIC else f" ({music})"
        _err(errors, "/music", "music could not be generated" + detail)
    elif music is not None and not isinstance(music, list):
        _err(errors, "/music", "must be array if present")
    elif music is not None:
        for mi, entry in enumerate(music):
            mpath = f"/music/{mi}"
            if not isinstance(entry, dict):
                _err(errors, mpath, "must be object")
                continue
            note = entry.get("note")
            is_rest = note == REST
            if not is_rest and clara_name_to_midi(note) is None:
                _err(errors, mpath + "/note", "must be 'Rest' or a note name like 'C3' or 'FS4'")
            vol = entry.get("volume")
            if not _is_int(vol) or not (0 <= vol <= 127):
                _err(errors, mpath + "/volume", "integer 0..127 required")
            elif is_rest and vol != 0:
                _err(errors, mpath + "/volume", "rests must have volume 0")
            dur = entry.get("duration")
            if not _is_int(dur) or not (0 <= dur <= MAX_DURATION):
                _err(errors, mpath + "/duration", f"integer 0..{MAX_DURATION} required")

    return errors


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Validate a C.L.A.R.A lighting config JSON")
    ap.add_argument("path", help="Path to config JSON file")
    args = ap.parse_args(argv)

    try:
        with open(args.path, "r", encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, ValueError) as e:
        print(f"error: failed to read {args.path}: {e}", file=sys.stderr)
        return 2

    errors = validate_config(doc)
    if errors:
        print("invalid lighting config:")
        for e in errors:
            print(f" - {e}")
        return 1

    print("ok: valid lighting config")
    return 0


if __name__ == "__main__":
    sys.exit(main())
