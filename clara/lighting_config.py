from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


ERROR_MUSIC = "Error parsing file - are you sure the file you provided is MIDI?"

DEFAULT_NAME = "New Lighting Config"


def _default_patterns() -> List[Dict[str, Any]]:
    return [{"id": "green", "leds": ["#00FF00"], "repeat": 0, "offset": 0}]


def _default_commands() -> List[Dict[str, Any]]:
    return [{"command": "display", "id": "green"}]


def new_config_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ConfigDefaults:
    """Values used when a lighting config has to be synthesized from scratch.

    ``id_factory`` is called once per synthesized document.
    """

    name: str = DEFAULT_NAME
    patterns: List[Dict[str, Any]] = field(default_factory=_default_patterns)
    commands: List[Dict[str, Any]] = field(default_factory=_default_commands)
    id_factory: Callable[[], str] = new_config_id


def default_config(defaults: Optional[ConfigDefaults] = None) -> Dict[str, Any]:
    """Return a fresh config document with a new id; safe to mutate."""
    d = defaults or ConfigDefaults()
    return {
        "id": d.id_factory(),
        "name": d.name,
        "patterns": copy.deepcopy(d.patterns),
        "commands": copy.deepcopy(d.commands),
    }


def load_base_config(text: Optional[str], defaults: Optional[ConfigDefaults] = None) -> Dict[str, Any]:
    """Parse an existing config, or synthesize a default one.

    Absent, malformed or non-object input is not an error: the caller gets a
    default document instead.
    """
    if text is None:
        return default_config(defaults)
    try:
        doc = json.loads(text)
    except (TypeError, ValueError):
        return default_config(defaults)
    if not isinstance(doc, dict):
        return default_config(defaults)
    return doc


def format_config(doc: Any) -> str:
    """Serialize a document the way the config store and editors expect (2-space indent)."""
    return json.dumps(doc, ensure_ascii=False, indent=2)
