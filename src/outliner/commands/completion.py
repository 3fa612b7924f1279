"""
outliner.commands.completion - Shell tab-completion setup.

Prints the argcomplete activation line for the current shell.
"""

from __future__ import annotations

import os
from pathlib import Path

_SNIPPETS = {
    "bash": 'eval "$(register-python-argcomplete outliner)"',
    "zsh": 'eval "$(register-python-argcomplete outliner)"',
    "fish": "register-python-argcomplete --shell fish outliner | source",
    "tcsh": "eval `register-python-argcomplete --shell tcsh outliner`",
}


def _detect_shell() -> str:
    """Detect the current shell from environment."""
    shell = os.environ.get("SHELL", "")
    basename = Path(shell).name if shell else ""
    return basename if basename in _SNIPPETS else "bash"


def run(args) -> int:
    """Handle ``outliner completion``."""
    shell = getattr(args, "shell", None) or _detect_shell()
    print(f"# Add to your {shell} startup file:")
    print(_SNIPPETS[shell])
    return 0
