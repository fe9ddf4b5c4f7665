"""Erowid Coin word graph and tweet sampler."""

import logging
import random
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Final, Protocol

import logs

logger = logging.getLogger(__name__)

TerminalPunctuation: Final[tuple[str, ...]] = ("!", ".", "?")


class RandomSource(Protocol):
	"""Anything that can draw ints in a closed range and pick from a list."""

	def randint(self, a: int, b: int) -> int:
		"""Return a random int N such that a <= N <= b."""

	def choice[T](self, seq: Sequence[T]) -> T:
		"""Return a random element of a non-empty sequence."""


class GenerationFailure(Enum):
	"""Reasons a walk through the graph can fail."""

	DeadEnd = "dead end"
	NoEntryWords = "no entry words"
	WeightInconsistency = "weight inconsistency"
	WalkTooLong = "walk too long"


# A fresh entry word may avoid these; the others fail every walk
RetryableFailures: Final[frozenset[GenerationFailure]] = frozenset({
	GenerationFailure.DeadEnd, GenerationFailure.WalkTooLong,
})


class GenerationError(Exception):
	"""Exception raised when a tweet cannot be generated."""

	def __init__(
		self, reason: GenerationFailure, *, word: str | None = None,
	) -> None:
		"""
		Build the message from the failure reason and offending word.

		Args:
			reason (GenerationFailure): Why the walk failed
			word (str | None): The word the walk was on when it failed, if
				there was one (default is None)

		"""
		self.reason = reason
		self.word = word
		super().__init__(
			f"Generation failed: {reason.value}"
			+ (f" at {word!r}" if word is not None else ""),
		)


def is_terminal(word: str) -> bool:
	return word.endswith(TerminalPunctuation)


def is_entry(word: str) -> bool:
	return word[:1].isupper()


class Node:
	"""
	A distinct word and its outgoing transitions.

	Attributes:
		edges (dict[str, int]): Successor word -> number of times it was
			seen right after this word
		total_weight (int): The sum of all edge weights

	"""

	def __init__(self) -> None:
		"""Create a node with no outgoing edges."""
		self.edges: dict[str, int] = {}
		self.total_weight = 0

	def strengthen_edge(self, word: str) -> None:
		"""Count one more transition from this word to word."""
		self.edges[word] = self.edges.get(word, 0) + 1
		self.total_weight += 1

	def next_word(self, rng: RandomSource) -> str:
		"""
		Pick a successor with probability weight / total_weight.

		Draw a number in [1, total_weight] and subtract edge weights until
		it drops to zero or below. The edge order does not matter; each
		edge owns a slice of the range exactly as wide as its weight.

		Args:
			rng (RandomSource): The random source to draw from

		Raises:
			GenerationError: DeadEnd if the node has no outgoing edges;
				WeightInconsistency if the edges do not add up to
				total_weight.

		Returns:
			str: The chosen successor.

		"""
		if self.total_weight <= 0:
			raise GenerationError(GenerationFailure.DeadEnd)
		number = rng.randint(1, self.total_weight)
		for word, weight in self.edges.items():
			number -= weight
			if number <= 0:
				return word
		raise GenerationError(GenerationFailure.WeightInconsistency)


class Graph:
	"""
	Word transition graph built from a corpus.

	Attributes:
		nodes (dict[str, Node]): Every word seen, as source or destination
		entry_words (list[str]): One element per capitalized occurrence;
			words seen capitalized more often are drawn more often

	"""

	def __init__(self) -> None:
		"""Create an empty graph."""
		self.nodes: dict[str, Node] = {}
		self.entry_words: list[str] = []

	@classmethod
	def from_documents(cls, documents: Iterable[str]) -> "Graph":
		"""Build a graph from an ordered iterable of documents."""
		graph = cls()
		for document in documents:
			graph.feed(document)
		logger.debug(
			"Built graph of %i words with %i entry words.",
			len(graph.nodes),
			len(graph.entry_words),
		)
		return graph

	def add(self, word: str, previous_word: str | None = None) -> None:
		"""
		Register a word and the transition that led to it.

		Args:
			word (str): The token just read
			previous_word (str | None): The token read right before it in
				the same document, if any (default is None)

		Raises:
			KeyError: If previous_word has never been added.

		"""
		if word not in self.nodes:
			self.nodes[word] = Node()
		if is_entry(word):
			self.entry_words.append(word)
		if previous_word is not None:
			try:
				previous = self.nodes[previous_word]
			except KeyError:
				msg = f"Unknown previous word: {previous_word!r}"
				raise KeyError(msg) from None
			previous.strengthen_edge(word)

	def feed(self, document: str) -> None:
		"""
		Add every whitespace-delimited token of a document in order.

		The chain restarts with each document, so no edge ever links the
		last word of one document to the first word of the next.

		Args:
			document (str): The full text of one corpus file

		"""
		previous_word: str | None = None
		for word in document.split():
			self.add(word, previous_word)
			previous_word = word

	def inconsistent_word(self) -> str | None:
		"""Return the first word whose total_weight is not its edge sum."""
		for word, node in self.nodes.items():
			if node.total_weight != sum(node.edges.values()):
				return word
		return None

	def is_consistent(self) -> bool:
		"""Check every node's total_weight against the sum of its edges."""
		return self.inconsistent_word() is None


class TweetSampler:
	"""
	Weighted random walks over a finished Graph.

	The graph is only read, never modified. All randomness comes from rng,
	so a seeded random.Random makes the output reproducible.

	Attributes:
		graph (Graph): The graph to walk
		rng (RandomSource): Source of randomness (default is the random
			module)
		max_words (int | None): Longest walk allowed before giving up;
			None means no limit (default is None)

	"""

	def __init__(
		self,
		graph: Graph,
		rng: RandomSource = random,
		max_words: int | None = None,
	) -> None:
		"""
		Check the graph once so no walk can draw from skewed weights.

		Args:
			graph (Graph): The graph to walk
			rng (RandomSource): Source of randomness (default is the random
				module)
			max_words (int | None): Longest walk allowed (default is None)

		Raises:
			GenerationError: WeightInconsistency if some node's total_weight
				does not match its edges.

		"""
		if (word := graph.inconsistent_word()) is not None:
			raise GenerationError(
				GenerationFailure.WeightInconsistency, word=word,
			)
		self.graph = graph
		self.rng = rng
		self.max_words = max_words

	def random_entry_word(self) -> str:
		"""Pick an entry word; repeated words are proportionally likelier."""
		if not self.graph.entry_words:
			raise GenerationError(GenerationFailure.NoEntryWords)
		return self.rng.choice(self.graph.entry_words)

	def generate(self) -> str:
		"""
		Walk from an entry word until a word ending in !, . or ? is reached.

		Raises:
			GenerationError: If there are no entry words, the walk hits a
				word with no successors, the weights are inconsistent, or
				the walk exceeds max_words.

		Returns:
			str: The visited words joined by single spaces.

		"""
		current = self.random_entry_word()
		words = [current]
		while not is_terminal(current):
			if self.max_words is not None and len(words) >= self.max_words:
				raise GenerationError(
					GenerationFailure.WalkTooLong, word=current,
				)
			try:
				current = self.graph.nodes[current].next_word(self.rng)
			except GenerationError as e:
				raise GenerationError(e.reason, word=current) from e
			words.append(current)
		return " ".join(words)

	def generate_many(self, count: int, attempts: int = 1) -> list[str]:
		"""
		Generate up to count tweets.

		A walk that dead-ends or runs too long is retried from a new entry
		word, up to attempts times. A tweet that fails every attempt is
		logged and skipped so the rest can still be generated.

		Args:
			count (int): The number of tweets wanted
			attempts (int): Tries per tweet (default is 1)

		Raises:
			GenerationError: NoEntryWords or WeightInconsistency, which no
				retry can fix.

		Returns:
			list[str]: The generated tweets; shorter than count if some
				tweets failed every attempt.

		"""
		tweets: list[str] = []
		attempts = max(attempts, 1)
		for i in range(1, count + 1):
			for attempt in range(1, attempts + 1):
				try:
					tweets.append(self.generate())
				except GenerationError as e:
					if e.reason not in RetryableFailures:
						raise
					logs.log_generation_error(e, attempt)
				else:
					break
			else:
				logger.warning(
					"Skipping tweet %i of %i after %i failed attempts.",
					i,
					count,
					attempts,
				)
		return tweets


def create_tweets(
	documents: Iterable[str],
	count: int,
	*,
	rng: RandomSource = random,
	max_words: int | None = None,
	attempts: int = 1,
) -> list[str]:
	"""
	Build a graph from the documents and sample tweets from it.

	Args:
		documents (Iterable[str]): Corpus texts, in reading order
		count (int): The number of tweets to generate
		rng (RandomSource): Source of randomness (default is the random
			module)
		max_words (int | None): Longest walk allowed (default is None)
		attempts (int): Tries per tweet (default is 1)

	Returns:
		list[str]: The generated tweets.

	"""
	sampler = TweetSampler(
		Graph.from_documents(documents), rng=rng, max_words=max_words,
	)
	return sampler.generate_many(count, attempts)
