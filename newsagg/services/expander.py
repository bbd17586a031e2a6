from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import orjson

BUNDLED_TERMS_PATH = Path(__file__).resolve().parent.parent / "data" / "terms.json"


@dataclass(slots=True)
class TermDictionary:
    """Versioned Hebrew <-> English phrase table.

    ``forward`` keys are Hebrew phrases matched exactly; ``reverse`` keys are
    English phrases matched on their lower-cased form.
    """

    forward: dict[str, list[str]] = field(default_factory=dict)
    reverse: dict[str, list[str]] = field(default_factory=dict)
    version: int = 1

    @classmethod
    def from_mapping(cls, data: dict) -> TermDictionary:
        return cls(
            forward={key.strip(): list(values) for key, values in data.get("forward", {}).items()},
            reverse={
                key.strip().lower(): list(values)
                for key, values in data.get("reverse", {}).items()
            },
            version=int(data.get("version", 1)),
        )

    @classmethod
    def load(cls, path: str | Path | None = None) -> TermDictionary:
        return cls.from_mapping(orjson.loads(Path(path or BUNDLED_TERMS_PATH).read_bytes()))

    def lookup(self, term: str) -> list[str]:
        term = term.strip()
        if not term:
            return []
        return self.forward.get(term, []) + self.reverse.get(term.lower(), [])

    def asymmetric_entries(self) -> list[tuple[str, str]]:
        """Keys none of whose mapped values map back to them.

        Returned as ``(direction, key)`` pairs, direction being ``"forward"``
        or ``"reverse"``.
        """
        problems: list[tuple[str, str]] = []
        for key, values in self.forward.items():
            if not any(key in self.reverse.get(value.lower(), []) for value in values):
                problems.append(("forward", key))
        for key, values in self.reverse.items():
            back = (
                [v.lower() for v in self.forward.get(value, [])] for value in values
            )
            if not any(key in mapped for mapped in back):
                problems.append(("reverse", key))
        return problems


@lru_cache
def get_term_dictionary(path: str | None = None) -> TermDictionary:
    return TermDictionary.load(path)


class QueryExpander:
    def __init__(self, terms: TermDictionary | None = None) -> None:
        self.terms = terms or get_term_dictionary()

    def expand(self, raw: str) -> set[str]:
        query = raw.strip()
        if not query:
            return set()
        variants = {query, query.lower()}
        variants.update(self.terms.lookup(query))

        words = query.split()
        if len(words) > 1:
            for word in words:
                variants.update(self.terms.lookup(word))
        return variants
