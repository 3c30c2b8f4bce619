import time
from pathlib import Path


def get_resource_path(relative_path: str) -> Path:
    """
    Get absolute path to a resource shipped inside the wk package.

    Args:
        relative_path: Path relative to the package (e.g., "resources/templates")

    Returns:
        Absolute Path object
    """
    return Path(__file__).parent.absolute() / relative_path


def epoch_now() -> int:
    """Wall-clock now in whole epoch seconds"""
    return int(time.time())


def format_duration(seconds: int) -> str:
    """Format seconds as 'Dd Hh Mm Ss', e.g. 3725 -> '0d 1h 2m 5s'"""
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{days}d {hours}h {minutes}m {seconds}s"
