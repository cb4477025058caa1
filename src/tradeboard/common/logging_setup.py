"""
Logging Setup mit Rotation für tradeboard
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(log_path="logs/tradeboard.log", level="INFO"):
    """
    Konfiguriert Logging mit Rotation und Console Output

    Args:
        log_path (str): Pfad zur Log-Datei (None/"" = nur Konsole)
        level (str): Logging Level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        logging.Logger: Konfigurierter Logger
    """
    logger = logging.getLogger("tradeboard")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Bestehende Handler entfernen (wichtig für reloads / mehrfachen CLI-Aufruf in Tests)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_path:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        # Rotating File Handler (2MB, 5 Backups)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=2*1024*1024,  # 2MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
