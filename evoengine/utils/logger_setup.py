"""loguru sinks for a simulation run, configured from the ``logging`` config node."""

from datetime import datetime, timezone
from pathlib import Path
import re
import sys

from loguru import logger
from omegaconf import DictConfig

RECORD_FORMAT = "{time:HH:mm:ss.SSS} | {level: <8} | {extra[run]} | {message}"


def run_name(cfg: DictConfig) -> str:
    """Stable file-name stem for a run, e.g. ``monkeys_seed7``."""
    stem = re.sub(r"[^a-z0-9]+", "_", str(cfg.get("name", "run")).lower()).strip("_")
    seed = cfg.get("seed")
    return f"{stem}_seed{seed}" if seed is not None else f"{stem}_unseeded"


def setup_logger(log_cfg: DictConfig, name: str) -> Path:
    """
    Route simulation logs to stderr and to ``<log_dir>/<name>_<timestamp>.log``.

    ``log_cfg`` carries ``log_dir``, ``level``, ``rotation`` and ``retention``;
    an optional ``file_level`` lets the file keep per-generation DEBUG lines
    while the console stays at ``level``. Every record is tagged with ``name``.
    """
    log_dir = Path(log_cfg.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{name}_{stamp}.log"

    logger.remove()
    logger.configure(extra={"run": name})
    logger.add(
        sys.stderr,
        level=log_cfg.level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        colorize=sys.stderr.isatty(),
    )
    logger.add(
        log_file,
        level=log_cfg.get("file_level", log_cfg.level),
        format=RECORD_FORMAT,
        rotation=log_cfg.rotation,
        retention=log_cfg.retention,
        compression="zip",
        encoding="utf-8",
    )

    logger.info("[Logger] Run {} logging to {}", name, log_file)
    return log_file
