#!/usr/bin/env python3
"""CLI entry point for /history skill.

Usage:
    python scripts/history_cli.py checkpoint create before-rewrite --message "Before restructuring"
    python scripts/history_cli.py log --type checkpoint_created --limit 5 --path ./my-doc
    python scripts/history_cli.py version bump major --notes "First release"
    python scripts/history_cli.py --verbose checkpoint restore before-rewrite
"""

import asyncio
import logging
import shlex
import sys
from pathlib import Path

# Add project root to path for dochistory imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dochistory.skills.history_router import handle_history_command


async def main():
    argv = sys.argv[1:]

    if "--verbose" in argv:
        argv = [a for a in argv if a != "--verbose"]
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not argv:
        # Default to help
        print(await handle_history_command("help"))
        sys.exit(0)

    # Re-quote so multi-word arguments survive the round trip through parse_flags
    args_str = shlex.join(argv)

    result = await handle_history_command(args_str)
    print(result)
    if result.startswith("Error:"):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
