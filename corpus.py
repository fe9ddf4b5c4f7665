"""Erowid Coin corpus reading."""

import logging
from pathlib import Path
from typing import Final

logger = logging.getLogger(__name__)

NotUtf8: Final[str] = "not valid UTF-8"


class CorpusError(OSError):
	"""Exception raised when the corpus directory or a file can't be read."""

	def __init__(self, path: Path, reason: str) -> None:
		"""
		OSError wrapper.

		Args:
			path (Path): The directory or file that failed
			reason (str): What went wrong

		"""
		self.path = path
		super().__init__(f"Could not read {path}: {reason}")


def read_document(path: Path) -> str:
	try:
		with path.open("r", encoding="UTF-8") as f:
			return f.read()
	except UnicodeDecodeError as e:
		raise CorpusError(path, NotUtf8) from e
	except OSError as e:
		raise CorpusError(path, e.strerror or str(e)) from e


def read_corpus(
	directory: Path, *, skip_unreadable: bool = False,
) -> list[str]:
	"""
	Read every file directly inside a directory, in filename order.

	Anything that is not a regular file, such as a subdirectory, socket
	or FIFO, is skipped. By default any file that fails to read ends
	the run; with skip_unreadable, it is logged and left out instead.

	Args:
		directory (Path): The directory holding the corpus text files
		skip_unreadable (bool): Whether to skip files that fail to read
			rather than raising (default is False)

	Raises:
		CorpusError: If the directory can't be listed, or a file can't be
			read and skip_unreadable is False.

	Returns:
		list[str]: The text of each file.

	"""
	try:
		paths = sorted(directory.iterdir())
	except OSError as e:
		raise CorpusError(directory, e.strerror or str(e)) from e

	documents: list[str] = []
	for path in paths:
		if not path.is_file():
			logger.debug("Skipping %s; not a regular file.", path)
			continue
		try:
			documents.append(read_document(path))
		except CorpusError:
			if not skip_unreadable:
				raise
			logger.warning("Skipping unreadable file %s.", path)
	logger.info("Read %i documents from %s.", len(documents), directory)
	return documents
