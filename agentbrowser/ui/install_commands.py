"""
Browser Installation Commands

Installs Chromium through Playwright and, on Linux, the system libraries
it needs. This module is lazy-loaded only when `install` is used.
Heavy dependencies (Rich) are isolated here to avoid runtime overhead.
"""

import logging
import subprocess
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console

from agentbrowser.utils import command_exists, get_os_name

console = Console()
logger = logging.getLogger(__name__)

# Package manager -> Chromium runtime libraries
SYSTEM_DEPENDENCIES = {
    "apt-get": [
        "libxcb-shm0", "libx11-xcb1", "libx11-6", "libxcb1", "libxext6",
        "libxrandr2", "libxcomposite1", "libxcursor1", "libxdamage1", "libxfixes3",
        "libxi6", "libgtk-3-0", "libpangocairo-1.0-0", "libpango-1.0-0", "libatk1.0-0",
        "libcairo-gobject2", "libcairo2", "libgdk-pixbuf-2.0-0", "libxrender1",
        "libasound2", "libfreetype6", "libfontconfig1", "libdbus-1-3", "libnss3",
        "libnspr4", "libatk-bridge2.0-0", "libdrm2", "libxkbcommon0", "libatspi2.0-0",
        "libcups2", "libxshmfence1", "libgbm1",
    ],
    "dnf": [
        "nss", "nspr", "atk", "at-spi2-atk", "cups-libs", "libdrm",
        "libXcomposite", "libXdamage", "libXrandr", "mesa-libgbm", "pango",
        "alsa-lib", "libxkbcommon", "libxcb", "libX11-xcb", "libX11", "libXext",
        "libXcursor", "libXfixes", "libXi", "gtk3", "cairo-gobject",
    ],
    "yum": [
        "nss", "nspr", "atk", "at-spi2-atk", "cups-libs", "libdrm",
        "libXcomposite", "libXdamage", "libXrandr", "mesa-libgbm", "pango",
        "alsa-lib", "libxkbcommon",
    ],
}

BROWSER_INSTALL = ["npx", "playwright", "install", "chromium"]

Runner = Callable[[Sequence[str]], int]


def _run(command: Sequence[str]) -> int:
    return subprocess.run(list(command), check=False).returncode


def detect_package_manager(
    exists: Callable[[str], bool] = command_exists,
) -> Optional[Tuple[str, List[str]]]:
    """First supported package manager on PATH, with its dependency list."""
    for manager, packages in SYSTEM_DEPENDENCIES.items():
        if exists(manager):
            return manager, packages
    return None


def build_dependency_command(manager: str, packages: List[str]) -> str:
    """Shell command line installing the given packages with sudo."""
    if manager == "apt-get":
        return f"sudo apt-get update && sudo apt-get install -y {' '.join(packages)}"
    return f"sudo {manager} install -y {' '.join(packages)}"


def install_system_dependencies(
    run: Runner = _run,
    exists: Callable[[str], bool] = command_exists,
) -> int:
    """
    Install Chromium's system libraries.

    Returns:
        0 when installed or attempted (failures are warnings), 1 when no
        supported package manager exists
    """
    console.print("[cyan]Installing system dependencies...[/cyan]")

    detected = detect_package_manager(exists)
    if detected is None:
        console.print("[red]✗[/red] No supported package manager found (apt-get, dnf, or yum)")
        return 1

    install_cmd = build_dependency_command(*detected)
    console.print(f"Running: {install_cmd}")
    try:
        status = run(["sh", "-c", install_cmd])
    except OSError as e:
        console.print(f"[yellow]⚠[/yellow] Could not run install command: {e}")
        return 0

    if status == 0:
        console.print("[green]✓[/green] System dependencies installed")
    else:
        console.print(
            "[yellow]⚠[/yellow] Failed to install some dependencies. "
            "You may need to run manually with sudo."
        )
    return 0


def handle_install(
    with_deps: bool = False,
    run: Runner = _run,
    exists: Callable[[str], bool] = command_exists,
    os_name: Optional[str] = None,
) -> int:
    """
    Install browser binaries, optionally with system dependencies.

    Args:
        with_deps: Also install system libraries (Linux only)
        run: Command runner returning an exit status
        exists: PATH lookup used to detect the package manager
        os_name: Operating system family, detected when omitted

    Returns:
        Process exit code
    """
    is_linux = (os_name or get_os_name()) == "Linux"

    if is_linux:
        if with_deps:
            status = install_system_dependencies(run, exists)
            if status != 0:
                return status
        else:
            console.print("[yellow]⚠[/yellow] Linux detected. If browser fails to launch, run:")
            console.print("  agent-browser install --with-deps")
            console.print("  or: npx playwright install-deps chromium")
            console.print()

    console.print("[cyan]Installing Chromium browser...[/cyan]")
    try:
        status = run(BROWSER_INSTALL)
    except OSError as e:
        logger.debug("npx launch failed", exc_info=True)
        console.print(f"[red]✗[/red] Failed to run npx: {e}")
        console.print("Make sure Node.js is installed and npx is in your PATH")
        return 1

    if status != 0:
        console.print("[red]✗[/red] Failed to install browser")
        if is_linux:
            console.print("[yellow]Tip:[/yellow] Try installing system dependencies first:")
            console.print("  agent-browser install --with-deps")
        return 1

    console.print("[green]✓[/green] Chromium installed successfully")
    if is_linux and not with_deps:
        console.print()
        console.print('[yellow]Note:[/yellow] If you see "shared library" errors when running, use:')
        console.print("  agent-browser install --with-deps")
    return 0
