"""Key names used by the rebase wizard and decoding of raw terminal input."""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
	"""What a key press means to the wizard."""

	UP = "up"
	DOWN = "down"
	MOVE_UP = "move_up"
	MOVE_DOWN = "move_down"
	ENTER = "enter"
	BACK = "back"
	CANCEL = "cancel"
	CYCLE = "cycle"
	PICK = "pick"
	SQUASH = "squash"
	REWORD = "reword"
	DROP = "drop"
	EDIT_MESSAGE = "edit_message"
	LOAD_MORE = "load_more"


KEY_BINDINGS: dict[str, Action] = {
	"up": Action.UP,
	"k": Action.UP,
	"down": Action.DOWN,
	"j": Action.DOWN,
	"K": Action.MOVE_UP,
	"shift+up": Action.MOVE_UP,
	"ctrl+up": Action.MOVE_UP,
	"J": Action.MOVE_DOWN,
	"shift+down": Action.MOVE_DOWN,
	"ctrl+down": Action.MOVE_DOWN,
	"enter": Action.ENTER,
	"b": Action.BACK,
	"q": Action.CANCEL,
	"esc": Action.CANCEL,
	"ctrl+c": Action.CANCEL,
	"tab": Action.CYCLE,
	"p": Action.PICK,
	"s": Action.SQUASH,
	"r": Action.REWORD,
	"d": Action.DROP,
	"e": Action.EDIT_MESSAGE,
	"l": Action.LOAD_MORE,
	"m": Action.LOAD_MORE,
}

ESCAPE_SEQUENCES: dict[str, str] = {
	"\x1b[A": "up",
	"\x1b[B": "down",
	"\x1bOA": "up",
	"\x1bOB": "down",
	"\x1b[1;2A": "shift+up",
	"\x1b[1;2B": "shift+down",
	"\x1b[1;5A": "ctrl+up",
	"\x1b[1;5B": "ctrl+down",
	# Windows scan codes as returned by click.getchar
	"\xe0H": "up",
	"\xe0P": "down",
	"\x00H": "up",
	"\x00P": "down",
}

CONTROL_KEYS: dict[str, str] = {
	"\r": "enter",
	"\n": "enter",
	"\t": "tab",
	"\x1b": "esc",
	"\x03": "ctrl+c",
}


def key_name(raw: str) -> str:
	"""
	Translate raw terminal input into a key name such as ``up`` or ``tab``.

	Printable characters are returned unchanged; unknown sequences are
	returned as-is and match no binding.
	"""
	if raw in ESCAPE_SEQUENCES:
		return ESCAPE_SEQUENCES[raw]
	return CONTROL_KEYS.get(raw, raw)


def action_for(key: str) -> Action | None:
	"""The action bound to ``key``, if any."""
	return KEY_BINDINGS.get(key)
