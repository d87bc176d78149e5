"""
Describes the processes behind PIDs found in port listings.
"""
import logging
from typing import Iterable, List

import psutil


def describe_pid(pid: int) -> str:
    """Returns 'name (pid N)', or just 'pid N' when the process is gone or hidden."""
    try:
        name = psutil.Process(pid).name()
    except psutil.NoSuchProcess:
        logging.debug(f"PID {pid} exited before it could be described.")
        return f"pid {pid}"
    except psutil.Error:
        return f"pid {pid}"
    return f"{name} (pid {pid})" if name else f"pid {pid}"


def describe_pids(pids: Iterable[int]) -> List[str]:
    """Describes each distinct PID once, in order."""
    return [describe_pid(pid) for pid in dict.fromkeys(pid for pid in pids if pid)]
