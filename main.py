"""
Entry point for the WordPress resource migration tool.
"""

import argparse
import sys

from resource_migrator.migration_tool import ResourceMigrationTool
from resource_migrator.utils.errors import MigrationAbortedError

CONFIG_FILE = "config/migration_config.json"


def main(argv=None) -> int:
    """
    Main function to run the resource migration.  Returns the process exit
    code: 0 once every post has been handled, 1 when the run was aborted
    before dispatch.
    """
    parser = argparse.ArgumentParser(
        description="Move images and archives referenced by WordPress posts to Cloud Files."
    )
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Configuration file (default: {CONFIG_FILE})")
    args = parser.parse_args(argv)

    tool = ResourceMigrationTool(config_file=args.config)
    tool.log_message("Starting WordPress resource migration.")

    try:
        tool.run()
    except MigrationAbortedError as e:
        tool.log_message(f"PROCESS ABORTED: {e}", level="ERROR")
        return 1

    tool.log_message("Migration process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
