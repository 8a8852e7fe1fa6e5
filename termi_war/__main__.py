from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Put the repository root (parent of this package) on ``sys.path``.

    Running ``python termi_war/__main__.py`` directly leaves the package
    undiscoverable; inserting its parent directory lets the imports resolve.
    """
    repo_root = str(Path(__file__).resolve().parent.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


try:
    # python -m termi_war
    from .app import run, setup_logging  # type: ignore[attr-defined]
    from .config import debug_enabled  # type: ignore[attr-defined]
except ImportError:
    # Executed as a script
    _ensure_repo_root_on_path()
    from termi_war.app import run, setup_logging  # type: ignore[attr-defined]
    from termi_war.config import debug_enabled  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running the shell from the command line."""
    setup_logging(debug=debug_enabled())
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
