"""Erowid Coin logging setup and log helpers."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

logger = logging.getLogger(__name__)

LogFormat: Final[str] = "%(asctime)s: %(levelname)s: %(message)s"
LogDateFormat: Final[str] = "%m/%d %H:%M:%S"
LogFileName: Final[str] = "%Y-%m-%d-%H-%M-%S.log"


def configure(
	level: int | str = logging.INFO, log_dir: Path | None = None,
) -> Path | None:
	"""
	Pipe logs to stderr and, optionally, a timestamped file in log_dir.

	Tweets go to stdout, so log lines always go to stderr.

	Args:
		level (int | str): The root log level (default is logging.INFO)
		log_dir (Path | None): Directory for log files; no file logging if
			None (default is None)

	Returns:
		Path | None: The log file being written to, if any.

	"""
	handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
	log_file: Path | None = None
	if log_dir is not None:
		log_dir.mkdir(parents=True, exist_ok=True)
		now = datetime.now(UTC).astimezone()
		log_file = log_dir / now.strftime(LogFileName)
		handlers.append(logging.FileHandler(log_file, encoding="UTF-8"))
	logging.basicConfig(
		format=LogFormat,
		datefmt=LogDateFormat,
		level=level,
		force=True,
		handlers=handlers,
	)
	return log_file


def log_generation_error(e: Exception, attempt: int) -> None:
	"""
	Act as a wrapper for logging.warning to report a failed walk.

	Args:
		e (Exception): The GenerationError that ended the walk
		attempt (int): Which try at this tweet failed, starting from 1

	"""
	logger.warning("Attempt %i failed: %s; Type: %s", attempt, e, type(e))
