"""Platform detection for system speech command selection."""

import platform as platform_module
from enum import Enum, auto


class Platform(Enum):
    """Operating system family, as far as speech commands are concerned."""

    MACOS = auto()
    LINUX = auto()
    OTHER = auto()


def detect_platform() -> Platform:
    """Detect the current platform.

    Returns:
        - MACOS for Darwin systems (`say`)
        - LINUX for Linux (`espeak`, festival's `text2wave`)
        - OTHER for everything else (no system speech)

    This function never raises exceptions.
    """
    system = platform_module.system()

    if system == "Darwin":
        return Platform.MACOS
    elif system == "Linux":
        return Platform.LINUX
    else:
        return Platform.OTHER


__all__ = ["Platform", "detect_platform"]
