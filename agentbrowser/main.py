#!/usr/bin/env python3
"""
Main entry point for the Typer-based agent-browser CLI.

This delegates to the UI layer in agentbrowser.ui.cli to keep the
console script mapping stable.
"""

from agentbrowser.ui.cli import run as agent_browser


if __name__ == "__main__":
    agent_browser()
