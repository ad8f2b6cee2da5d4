"""
Rendering of daemon responses for the terminal.

Human mode picks one rendering from the shape of the response data;
JSON mode prints the Response document as received.
"""

import json
from typing import Any, NamedTuple

from agentbrowser.daemon.protocol import Response


# ANSI SGR codes
TEXT_STYLE_MAPPING = {
    "green": "32",
    "red": "31",
    "yellow": "33",
    "cyan": "36",
    "bold": "1",
    "dim": "2",
}

CHECK = "✓"
CROSS = "✗"


class RenderedOutput(NamedTuple):
    stdout: str
    stderr: str
    exit_code: int


def get_styled_text(text: str, style: str) -> str:
    """
    Get styled text.

    Raises:
        ValueError: If the specified style is not supported
    """
    if style not in TEXT_STYLE_MAPPING:
        raise ValueError(
            f"Unsupported style: {style}. Available styles: {', '.join(TEXT_STYLE_MAPPING.keys())}"
        )
    return f"\x1b[{TEXT_STYLE_MAPPING[style]}m{text}\x1b[0m"


def format_error(message: str) -> str:
    """Error line as shown on stderr."""
    return f"{get_styled_text(f'{CROSS} Error:', 'red')} {message}"


def _string_field(data: Any, key: str):
    if isinstance(data, dict) and isinstance(data.get(key), str):
        return data[key]
    return None


def _render_data(data: Any) -> str:
    """Pick the first matching shape; order matters."""
    url = _string_field(data, "url")
    title = _string_field(data, "title")
    if url is not None and title is not None:
        return "\n".join([
            f"{get_styled_text(CHECK, 'green')} {get_styled_text(title, 'bold')}",
            get_styled_text(f"  {url}", "dim"),
        ])
    if url is not None:
        return url

    snapshot = _string_field(data, "snapshot")
    if snapshot is not None:
        return snapshot
    if title is not None:
        return title

    text = _string_field(data, "text")
    if text is not None:
        return text

    if isinstance(data, dict) and "result" in data:
        return json.dumps(data["result"], indent=2, ensure_ascii=False)
    if isinstance(data, dict) and "closed" in data:
        return f"{get_styled_text(CHECK, 'green')} Browser closed"
    return f"{get_styled_text(CHECK, 'green')} Done"


def render_response(response: Response, json_mode: bool = False) -> RenderedOutput:
    """
    Render a daemon response.

    Args:
        response: Parsed daemon response
        json_mode: Print the raw Response document instead of prose

    Returns:
        RenderedOutput with stdout text, stderr text and exit code
    """
    exit_code = 0 if response.success else 1

    if json_mode:
        return RenderedOutput(json.dumps(response.to_dict(), ensure_ascii=False), "", exit_code)

    if not response.success:
        return RenderedOutput("", format_error(response.error_message), exit_code)

    return RenderedOutput(_render_data(response.data), "", exit_code)


def render_failure(message: str, json_mode: bool = False) -> RenderedOutput:
    """Render an error raised before the daemon answered."""
    if json_mode:
        return render_response(Response.failure(message), json_mode=True)
    return RenderedOutput("", format_error(message), 1)
