"""Domain-name corpus the generator samples queries from."""
from __future__ import annotations

import random
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

from dnsFlail.logging_config import get_logger

logger = get_logger("generator")


class EmptyCorpusError(ValueError):
    """Raised when a names source holds no usable entries."""


class NameCorpus:
    """Immutable, non-empty sequence of candidate DNS names."""

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str]) -> None:
        self._names: Tuple[str, ...] = tuple(names)
        if not self._names:
            raise EmptyCorpusError("names corpus is empty")

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "NameCorpus":
        """Trim each line and keep the ones that are not blank."""
        return cls(stripped for stripped in (line.strip() for line in lines) if stripped)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "NameCorpus":
        """Read one name per line from a UTF-8 text file."""
        source = Path(path)
        with source.open("r", encoding="utf-8") as handle:
            try:
                corpus = cls.from_lines(handle)
            except EmptyCorpusError:
                raise EmptyCorpusError(f"no names found in {source}") from None
        logger.info(
            f"Loaded {len(corpus)} names from {source}",
            extra={"corpus_size": len(corpus)},
        )
        return corpus

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def sample(self, rng: random.Random) -> str:
        """Pick one name uniformly at random, with replacement."""
        return self._names[rng.randrange(len(self._names))]

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __repr__(self) -> str:
        return f"NameCorpus(size={len(self._names)})"
