import platform
import shutil
from typing import Optional


def get_os_name() -> Optional[str]:
    """
    Get the operating system family.

    Returns:
        "Linux", "MacOS", "Windows", or None if unknown
    """
    oper_sys = platform.system()
    if oper_sys == "Darwin":
        return "MacOS"
    if oper_sys in ("Linux", "Windows"):
        return oper_sys
    return None


def command_exists(name: str) -> bool:
    """Whether an executable is on PATH."""
    return shutil.which(name) is not None
