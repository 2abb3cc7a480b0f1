"""CLI interface for administering a security model."""

import sys
from pathlib import Path
from typing import List, Optional

from ..common.config import AuthStoreConfig, StoreConfig, load_typed_config
from ..common.logger import setup_logger
from ..model.exceptions import SecurityError
from ..model.factory import create_security_model
from .commands import build_parser, run_command

STORE_SUFFIXES = {".xml": "xml", ".yaml": "yaml", ".yml": "yaml"}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the administration CLI."""
    args = build_parser().parse_args(argv)

    # Use defaults if config not found
    try:
        config = load_typed_config(args.config)
    except FileNotFoundError:
        config = AuthStoreConfig()

    if args.store:
        store_type = STORE_SUFFIXES.get(Path(args.store).suffix.lower(), config.store.type)
        config.store = StoreConfig(type=store_type, path=args.store)

    try:
        setup_logger(
            level=args.log_level or config.logging.level,
            log_dir=config.logging.log_dir,
            file_logging=config.logging.file_logging,
            console_logging=config.logging.console_logging,
        )

        model = create_security_model(config)
        return run_command(model, args)
    except (SecurityError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
