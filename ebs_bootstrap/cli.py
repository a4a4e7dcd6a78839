"""
Command line entry point, and the single boundary where failures are escalated.
"""

import logging
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .bootstrap import run_bootstrap
from .config import build_parser, load_config
from .errors import BootstrapError, ConfigurationError
from .escalation import escalate

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    set_debug(debug)


def set_debug(debug: bool) -> None:
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)
    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.INFO if debug else logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the bootstrap and return 0, or exit non-zero through the escalator."""
    configure_logging()

    # Until the configuration is loaded, fail safe
    shutdown = True
    try:
        try:
            config = load_config(argv)
        except ConfigurationError as e:
            build_parser().print_usage(sys.stderr)
            logger.error("Error: %s", e)
            return 1

        shutdown = config.shutdown_on_failure
        set_debug(config.debug)

        logger.info("Running attach-ebs for volume %s on instance %s in %s",
                    config.volume, config.instance_id, config.region)
        ec2_client = boto3.client("ec2", region_name=config.region)
        run_bootstrap(config, ec2_client)
    except BootstrapError as e:
        escalate(str(e), shutdown=shutdown)
    except (OSError, BotoCoreError) as e:
        escalate(f"Unexpected error: {e}", shutdown=shutdown)

    return 0


if __name__ == "__main__":
    sys.exit(main())
