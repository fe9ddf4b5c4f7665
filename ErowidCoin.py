"""
Erowid Coin command line interface, settings, and main.

Erowid Coin is a Markov chain generator for tweeting about the unholy
marriage of erowid trip reports and cryptocurrency, built from a directory
of local text files.
"""

import argparse
import logging
import random
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import dotenv

import corpus
import logs
import markov

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

# Exit codes
Ok: Final[int] = 0
CorpusFailed: Final[int] = 1
BadArguments: Final[int] = 2
GenerationFailed: Final[int] = 3

EnvPath: Final[Path] = Path(".env")

Description = (
	"Generate tweets by walking a Markov chain built from every text file"
	" in a directory."
)


@dataclass(frozen=True)
class Settings:
	"""
	Defaults pulled from .env; command line options override them.

	Attributes:
		tweet_count (int): Tweets to generate when no count is given
		max_words (int | None): Longest walk allowed; None for no limit
		attempts (int): Tries per tweet before it is skipped
		seed (int | None): Seed for a reproducible run
		log_level (str): Root log level name
		log_dir (Path | None): Directory for log files, if any

	"""

	tweet_count: int = 1
	max_words: int | None = None
	attempts: int = 1
	seed: int | None = None
	log_level: str = "INFO"
	log_dir: Path | None = None


def env_int(
	env: Mapping[str, str | None], key: str, minimum: int | None = None,
) -> int | None:
	"""
	Pull an integer out of the .env values.

	Args:
		env (Mapping[str, str | None]): The parsed .env file
		key (str): The variable to look up
		minimum (int | None): Smallest acceptable value, if any (default is
			None)

	Returns:
		int | None: The value, or None if it is unset or malformed.

	"""
	if not (value := env.get(key)):
		return None
	try:
		number = int(value)
	except ValueError:
		logger.warning("Ignoring %s=%s in .env; not an integer.", key, value)
		return None
	if minimum is not None and number < minimum:
		logger.warning(
			"Ignoring %s=%i in .env; must be at least %i.",
			key,
			number,
			minimum,
		)
		return None
	return number


def load_settings(env_path: Path = EnvPath) -> Settings:
	"""
	Read settings from a .env file.

	Erowid Coin runs fine without a .env file; every key has a default.

	Args:
		env_path (Path): The .env file to read (default is .env in the
			working directory)

	Returns:
		Settings: The settings, with defaults filled in.

	"""
	env = dotenv.dotenv_values(env_path)
	defaults = Settings()

	count = env_int(env, "TWEETCOUNT", 0)
	attempts = env_int(env, "ATTEMPTS", 1)

	log_level = (env.get("LOGLEVEL") or defaults.log_level).upper()
	if log_level not in logging.getLevelNamesMapping():
		logger.warning("Unknown LOGLEVEL %s; using INFO.", log_level)
		log_level = defaults.log_level

	log_dir = env.get("LOGDIR")
	return Settings(
		tweet_count=defaults.tweet_count if count is None else count,
		max_words=env_int(env, "MAXWORDS", 1),
		attempts=defaults.attempts if attempts is None else attempts,
		seed=env_int(env, "SEED"),
		log_level=log_level,
		log_dir=Path(log_dir) if log_dir else None,
	)


def bounded_int(minimum: int, name: str) -> Callable[[str], int]:
	"""
	Build an argparse type that accepts integers of at least minimum.

	Args:
		minimum (int): The smallest acceptable value
		name (str): What the value counts, for error messages

	Returns:
		Callable[[str], int]: The argparse type function.

	"""

	def parse(value: str) -> int:
		try:
			number = int(value)
		except ValueError:
			msg = f"could not parse {name}: {value!r}"
			raise argparse.ArgumentTypeError(msg) from None
		if number < minimum:
			msg = f"{name} must be at least {minimum}, not {number}"
			raise argparse.ArgumentTypeError(msg)
		return number

	return parse


def build_parser(settings: Settings) -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="erowidcoin", description=Description,
	)
	parser.add_argument(
		"directory", type=Path, help="directory of text files to learn from",
	)
	parser.add_argument(
		"count",
		nargs="?",
		type=bounded_int(0, "number of tweets"),
		default=settings.tweet_count,
		help="number of tweets to generate (default: %(default)s)",
	)
	parser.add_argument(
		"--seed",
		type=int,
		default=settings.seed,
		help="seed the random generator for a reproducible run",
	)
	parser.add_argument(
		"--max-words",
		type=bounded_int(1, "max words"),
		default=settings.max_words,
		help="give up on a tweet after this many words",
	)
	parser.add_argument(
		"--attempts",
		type=bounded_int(1, "attempts"),
		default=settings.attempts,
		help="tries per tweet before skipping it (default: %(default)s)",
	)
	parser.add_argument(
		"--skip-unreadable",
		action="store_true",
		help="skip files that can't be read instead of stopping",
	)
	parser.add_argument(
		"--version", action="version", version=f"%(prog)s {__version__}",
	)
	return parser


def main(
	argv: Sequence[str] | None = None, settings: Settings | None = None,
) -> int:
	"""
	Read the corpus, generate tweets, and print each one.

	Each tweet is followed by a blank line. Nothing is generated if the
	arguments are bad or the corpus can't be read.

	Args:
		argv (Sequence[str] | None): Command line arguments, without the
			program name; sys.argv[1:] if None (default is None)
		settings (Settings | None): Defaults for the options; read from
			.env if None (default is None)

	Returns:
		int: Ok on success; CorpusFailed if the corpus could not be read;
			BadArguments if the arguments were invalid; GenerationFailed if
			any tweet could not be generated.

	"""
	if settings is None:
		settings = load_settings()
	try:
		args = build_parser(settings).parse_args(argv)
	except SystemExit as e:
		# argparse exits 0 for --help and --version, 2 for bad arguments
		return Ok if e.code == Ok else BadArguments

	rng: markov.RandomSource = random
	if args.seed is not None:
		rng = random.Random(args.seed)

	try:
		documents = corpus.read_corpus(
			args.directory, skip_unreadable=args.skip_unreadable,
		)
	except corpus.CorpusError:
		logger.exception("Failed to read the corpus!")
		return CorpusFailed

	try:
		tweets = markov.create_tweets(
			documents,
			args.count,
			rng=rng,
			max_words=args.max_words,
			attempts=args.attempts,
		)
	except markov.GenerationError:
		logger.exception("Failed to generate tweets!")
		return GenerationFailed

	for tweet in tweets:
		sys.stdout.write(f"{tweet}\n\n")

	if len(tweets) < args.count:
		logger.error(
			"Only generated %i of %i tweets.", len(tweets), args.count,
		)
		return GenerationFailed
	return Ok


def cli() -> None:
	"""Launch Erowid Coin with .env settings and logging configured."""
	settings = load_settings()
	logs.configure(settings.log_level, settings.log_dir)
	sys.exit(main(settings=settings))


if __name__ == "__main__":  # pragma: no cover
	cli()
