import logging
from pathlib import Path


def setup_logger(name: str = "opt_sim", log_dir: str | None = None, log_file: str = "run.log",
                 console_level: str = "INFO", file_level: str = "DEBUG"):
    """
    Set up a logger that writes to the console and, if log_dir is given, to a file in log_dir.

    Replicates log from worker threads, so the file format includes the thread name.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)  # Capture all levels, handlers will filter

    # Avoid duplicate handlers
    if not logger.handlers:
        # Console handler
        ch = logging.StreamHandler()
        ch.setLevel(getattr(logging, console_level.upper(), logging.INFO))
        ch_fmt = logging.Formatter("[%(levelname)s] %(message)s")
        ch.setFormatter(ch_fmt)
        logger.addHandler(ch)

        # File handler
        if log_dir is not None:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(Path(log_dir) / log_file, encoding="utf-8")
            fh.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
            fh_fmt = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
            )
            fh.setFormatter(fh_fmt)
            logger.addHandler(fh)

    return logger


def setup_logger_from_config(monitoring_config, name: str = "opt_sim"):
    """Configure the package logger from a ``MonitoringConfig``."""
    return setup_logger(name, log_dir=monitoring_config.log_dir,
                        console_level=monitoring_config.log_level)
