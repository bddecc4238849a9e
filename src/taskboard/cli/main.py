# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs a single command from the
registry and prints its reply. Commands that work on the schema itself
(migrate, health) get an AppState without stores, since opening the stores
would migrate first.

Exit codes: 0 ok, 1 usage or domain error, 2 unexpected failure (logged).
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import UsageError, registry
from ..config import get_settings
from ..errors import TaskboardError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    setup_logging(log_dir=settings.log_dir, level=settings.log_level)

    args = list(sys.argv[1:] if argv is None else argv) or ["help"]
    logger.debug("Running %s command=%s", settings.app_name, args[0])

    try:
        state = create_initial_state(
            settings=settings, open_stores=registry.needs_stores(args[0])
        )
        reply = registry.handle(state, args)
    except (UsageError, TaskboardError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Command failed: %s", args[0])
        return 2

    print(reply)
    return 0


if __name__ == "__main__":
    sys.exit(main())
