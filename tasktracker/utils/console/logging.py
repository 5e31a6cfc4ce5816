import logging
from enum import Enum
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler


class Verbosity(Enum):
    NORMAL = 0
    VERBOSE = 1
    VERY_VERBOSE = 2


def cli_flags_to_verbosity(verbose_flags: Optional[List[bool]]) -> Verbosity:
    if verbose_flags is None or len(verbose_flags) == 0:
        return Verbosity.NORMAL
    elif len(verbose_flags) == 1:
        return Verbosity.VERBOSE
    else:
        return Verbosity.VERY_VERBOSE


def suppress_noisy_logs():
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def init_logging(verbose_flags: Optional[List[bool]] = None) -> Console:
    verbosity = cli_flags_to_verbosity(verbose_flags)

    if verbosity == Verbosity.NORMAL:
        level = logging.WARNING
    elif verbosity == Verbosity.VERBOSE:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        force=True,
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                show_level=False,
                markup=True,
                show_time=False,
                show_path=False,
                console=Console(width=None, stderr=True),
            )
        ],
    )
    if verbosity != Verbosity.VERY_VERBOSE:
        suppress_noisy_logs()

    logging.debug(f"verbosity is {verbosity}")

    return Console()
