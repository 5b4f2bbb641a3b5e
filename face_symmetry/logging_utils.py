from datetime import datetime

from .config import LOG_FILE, LOG_INTERVAL


def log(message: str, level: str = "INFO") -> None:
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] {level:<5} {message}"
    print(line)
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        pass


def warn(message: str) -> None:
    log(message, level="WARN")


def log_periodic(frame_idx: int, message: str, interval: int = LOG_INTERVAL) -> None:
    """Log only every ``interval`` frames so the capture loop stays quiet."""
    if interval > 0 and frame_idx % interval == 0:
        log(message)
