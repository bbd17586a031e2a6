from .aggregator import NewsAggregator, SearchSession
from .dedup import merge
from .enrichment import ImageEnricher
from .expander import QueryExpander, TermDictionary
from .normalizer import FeedNormalizer
from .ranking import rank
from .retrieval import RetrievalOrchestrator, RetrievalStrategy

__all__ = [
    "FeedNormalizer",
    "ImageEnricher",
    "NewsAggregator",
    "QueryExpander",
    "RetrievalOrchestrator",
    "RetrievalStrategy",
    "SearchSession",
    "TermDictionary",
    "merge",
    "rank",
]
