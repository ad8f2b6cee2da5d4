"""
Command translation for the agent-browser CLI.

Turns free-form command-line tokens into request dicts for the daemon.
Translation is purely syntactic; whether an action makes sense on the
current page is the daemon's call.
"""

import re
from typing import Any, Callable, Dict, Optional, Sequence

from agentbrowser.daemon.protocol import generate_request_id

Request = Dict[str, Any]

_INT = re.compile(r"[+-]?[0-9]+")
_UINT = re.compile(r"\+?[0-9]+")

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
UINT64_MAX = 2 ** 64 - 1


def _arg(rest: Sequence[str], index: int) -> Optional[str]:
    return rest[index] if index < len(rest) else None


def _navigate(rest: Sequence[str]) -> Optional[Request]:
    url = _arg(rest, 0)
    if url is None:
        return None
    if not url.startswith("http"):
        url = f"https://{url}"
    return {"action": "navigate", "url": url}


def _selector_action(action: str) -> Callable[[Sequence[str]], Optional[Request]]:
    def translate_selector(rest: Sequence[str]) -> Optional[Request]:
        selector = _arg(rest, 0)
        if selector is None:
            return None
        return {"action": action, "selector": selector}
    return translate_selector


def _input_action(action: str, field: str) -> Callable[[Sequence[str]], Optional[Request]]:
    def translate_input(rest: Sequence[str]) -> Optional[Request]:
        selector = _arg(rest, 0)
        if selector is None:
            return None
        return {"action": action, "selector": selector, field: " ".join(rest[1:])}
    return translate_input


def _bare_action(action: str) -> Callable[[Sequence[str]], Optional[Request]]:
    def translate_bare(rest: Sequence[str]) -> Optional[Request]:
        return {"action": action}
    return translate_bare


def _snapshot(rest: Sequence[str]) -> Optional[Request]:
    """
    Scan every token for snapshot flags.

    Flags may come in any order. A value flag whose value is missing (or,
    for --depth, not a 32-bit integer) is skipped; unknown flags are ignored.
    """
    request: Request = {"action": "snapshot"}
    for i, arg in enumerate(rest):
        if arg in ("-i", "--interactive"):
            request["interactive"] = True
        elif arg in ("-c", "--compact"):
            request["compact"] = True
        elif arg in ("-d", "--depth"):
            depth = _arg(rest, i + 1)
            if depth is not None and _INT.fullmatch(depth):
                if INT32_MIN <= int(depth) <= INT32_MAX:
                    request["maxDepth"] = int(depth)
        elif arg in ("-s", "--selector"):
            selector = _arg(rest, i + 1)
            if selector is not None:
                request["selector"] = selector
    return request


def _screenshot(rest: Sequence[str]) -> Optional[Request]:
    return {"action": "screenshot", "path": _arg(rest, 0)}


def _get(rest: Sequence[str]) -> Optional[Request]:
    what = _arg(rest, 0)
    if what == "text":
        selector = _arg(rest, 1)
        if selector is None:
            return None
        return {"action": "gettext", "selector": selector}
    if what == "url":
        return {"action": "url"}
    if what == "title":
        return {"action": "title"}
    return None


def _press(rest: Sequence[str]) -> Optional[Request]:
    key = _arg(rest, 0)
    if key is None:
        return None
    return {"action": "press", "key": key}


def _wait(rest: Sequence[str]) -> Optional[Request]:
    target = _arg(rest, 0)
    if target is None:
        return None
    if _UINT.fullmatch(target) and int(target) <= UINT64_MAX:
        return {"action": "wait", "timeout": int(target)}
    return {"action": "wait", "selector": target}


def _evaluate(rest: Sequence[str]) -> Optional[Request]:
    return {"action": "evaluate", "script": " ".join(rest)}


COMMANDS: Dict[str, Callable[[Sequence[str]], Optional[Request]]] = {
    "open": _navigate,
    "goto": _navigate,
    "navigate": _navigate,
    "click": _selector_action("click"),
    "fill": _input_action("fill", "value"),
    "type": _input_action("type", "text"),
    "hover": _selector_action("hover"),
    "snapshot": _snapshot,
    "screenshot": _screenshot,
    "close": _bare_action("close"),
    "quit": _bare_action("close"),
    "exit": _bare_action("close"),
    "get": _get,
    "press": _press,
    "wait": _wait,
    "back": _bare_action("back"),
    "forward": _bare_action("forward"),
    "reload": _bare_action("reload"),
    "eval": _evaluate,
}


def translate(tokens: Sequence[str]) -> Optional[Request]:
    """
    Map command-line tokens to a daemon request.

    Args:
        tokens: Command name followed by its arguments (global flags removed)

    Returns:
        Request dict with a fresh 'id' and an 'action', or None when the
        command is unknown or a required argument is missing
    """
    if not tokens:
        return None

    handler = COMMANDS.get(tokens[0])
    if handler is None:
        return None

    request = handler(list(tokens[1:]))
    if request is None:
        return None
    return {"id": generate_request_id(), **request}
