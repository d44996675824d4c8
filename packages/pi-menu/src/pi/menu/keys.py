"""Decode raw terminal input into key identifiers and mouse events.

Key identifiers are strings such as ``"a"``, ``"ctrl+w"``, ``"shift+alt+g"``
or ``"pageDown"``. Modifiers always appear in the order ``ctrl``, ``shift``,
``alt``. Legacy escape sequences, the Kitty keyboard protocol (``CSI u``)
and xterm's modifyOtherKeys format are understood.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

KeyId = str

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

_MODIFIER_ORDER = ("ctrl", "shift", "alt")

LOCK_MASK = 64 + 128

# Unmodified legacy sequences
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[7~": "home",
    "\x1b[4~": "end",
    "\x1b[8~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[Z": "shift+tab",
    "\x1bOM": "enter",
}

# Final byte of ``CSI 1;<mod> X`` and number of ``CSI <n>;<mod> ~``
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}
_CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
}

# Kitty codepoints with a name of their own
CODEPOINTS: dict[int, str] = {
    9: "tab",
    13: "enter",
    27: "escape",
    32: "space",
    127: "backspace",
    57414: "enter",  # keypad enter
}

_MODIFIED_CSI_RE = re.compile(r"^\x1b\[1;(\d+)([A-DHF])$")
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")
_KITTY_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*)*(?:;(\d+)(?::(\d+))?)?u$")
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")
_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")


def _prefix(modifier: int) -> str:
    """Turn a wire modifier value (1 + bits) into a ``ctrl+shift+alt+`` prefix."""
    bits = (modifier - 1) & ~LOCK_MASK
    return "".join(f"{name}+" for name in _MODIFIER_ORDER if bits & MODIFIERS[name])


def normalize_key_id(key_id: str) -> KeyId:
    """Put the modifiers of a user-written key id into canonical order.

    ``"Alt+Shift+G"`` becomes ``"shift+alt+g"``; named keys keep their
    spelling (``pageUp``), single characters are lower-cased.
    """
    parts = key_id.split("+")
    if key_id.endswith("+"):
        parts = [*key_id[:-1].split("+")[:-1], "+"]
    mods = {p.lower() for p in parts[:-1]}
    key = parts[-1]
    if len(key) == 1:
        key = key.lower()
    return "".join(f"{m}+" for m in _MODIFIER_ORDER if m in mods) + key


def _codepoint_key(codepoint: int, modifier: int) -> KeyId | None:
    prefix = _prefix(modifier)
    name = CODEPOINTS.get(codepoint)
    if name is not None:
        return prefix + name
    if codepoint > 0:
        ch = chr(codepoint)
        if ch.isprintable():
            if ch.isupper():
                bits = ((modifier - 1) & ~LOCK_MASK) | MODIFIERS["shift"]
                prefix = _prefix(bits + 1)
                ch = ch.lower()
            return prefix + ch
    return None


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Return the key identifier for one complete input sequence.

    Returns ``None`` for sequences that are not keys (mouse reports, terminal
    replies, multi-character text).
    """
    if not data:
        return None

    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    m = _MODIFIED_CSI_RE.match(data)
    if m:
        return _prefix(int(m.group(1))) + _CSI_LETTER_KEYS[m.group(2)]

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        return _codepoint_key(int(m.group(2)), int(m.group(1)))

    m = _MODIFIED_TILDE_RE.match(data)
    if m:
        name = _CSI_TILDE_KEYS.get(int(m.group(1)))
        return _prefix(int(m.group(2))) + name if name else None

    m = _KITTY_CSI_U_RE.match(data)
    if m:
        modifier = int(m.group(2)) if m.group(2) else 1
        return _codepoint_key(int(m.group(1)), modifier)

    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        if inner is None:
            return None
        if inner == data[1] and data[1].isupper():
            return "shift+alt+" + data[1].lower()
        if inner.startswith("ctrl+"):
            return "ctrl+alt+" + inner[len("ctrl+"):]
        return "alt+" + inner

    if len(data) == 1 and data.isprintable():
        return data

    return None


def is_text_input(data: str) -> bool:
    """True if *data* is plain text to insert rather than a key sequence."""
    return bool(data) and all(
        ord(ch) >= 0x20 and ord(ch) != 0x7F and not 0x80 <= ord(ch) <= 0x9F
        for ch in data
    )


# ---------------------------------------------------------------------------
# Mouse
# ---------------------------------------------------------------------------

MouseButton = Literal["left", "middle", "right", "wheelUp", "wheelDown", "none"]

_BUTTONS: dict[int, MouseButton] = {
    0: "left",
    1: "middle",
    2: "right",
    3: "none",
    64: "wheelUp",
    65: "wheelDown",
}


@dataclass(frozen=True)
class MouseEvent:
    """An SGR mouse report. ``x`` and ``y`` are zero-based cells."""

    button: MouseButton
    x: int
    y: int
    pressed: bool
    motion: bool = False
    shift: bool = False


def parse_mouse(data: str) -> MouseEvent | None:
    m = _SGR_MOUSE_RE.match(data)
    if not m:
        return None
    code = int(m.group(1))
    return MouseEvent(
        button=_BUTTONS.get(code & ~(4 | 8 | 16 | 32), "none"),
        x=int(m.group(2)) - 1,
        y=int(m.group(3)) - 1,
        pressed=m.group(4) == "M",
        motion=bool(code & 32),
        shift=bool(code & 4),
    )
