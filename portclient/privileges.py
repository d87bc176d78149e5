"""
Handles privilege checking for termination commands.
"""
import os
import platform
import ctypes


def is_admin() -> bool:
    """
    Checks if the process is running with administrator or root privileges.

    Returns:
        bool: True if running with elevated privileges, False otherwise.
    """
    try:
        if platform.system() == "Windows":
            return ctypes.windll.shell32.IsUserAnAdmin() != 0  # type: ignore[attr-defined]
        elif hasattr(os, 'geteuid'):
            return os.geteuid() == 0  # type: ignore[attr-defined]  # pylint: disable=no-member
        return False
    except AttributeError:
        return False


def elevation_hint() -> str:
    """Advice appended to termination failures when not running elevated."""
    if is_admin():
        return ""
    if platform.system() == "Windows":
        return "Try again from an Administrator prompt."
    return "Processes owned by other users need 'sudo'."
