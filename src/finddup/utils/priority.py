"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/priority.py
Best-effort lowering of CPU and I/O scheduling priority for long scans.
Nothing here may fail a scan: unsupported hosts are logged and ignored.
"""
import logging
import os
import sys

import psutil

logger = logging.getLogger(__name__)

NICE_INCREMENT = 10


def lower_priority() -> bool:
    """
    Lower the current process CPU niceness and move it to the idle I/O class.
    Returns True if at least one of the two adjustments took effect.
    """
    changed = False

    try:
        os.nice(NICE_INCREMENT)
        changed = True
        logger.debug(f"CPU niceness raised by {NICE_INCREMENT}")
    except (AttributeError, OSError) as e:
        # os.nice does not exist on Windows
        logger.debug(f"Could not lower CPU priority: {e}")

    try:
        process = psutil.Process()
        if sys.platform.startswith("linux"):
            process.ionice(psutil.IOPRIO_CLASS_IDLE)
        elif sys.platform == "win32":
            process.ionice(psutil.IOPRIO_VERYLOW)
        else:
            logger.debug(f"I/O priority not supported on {sys.platform}")
            return changed
        changed = True
        logger.debug("I/O priority set to idle")
    except (AttributeError, OSError, psutil.Error) as e:
        logger.debug(f"Could not lower I/O priority: {e}")

    return changed
