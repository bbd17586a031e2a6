from .article import Article, Query, ScoredArticle, make_article_id
from .corpus import CorpusSnapshot, CorpusStats, FetchReport, SearchResult
from .source import RawPayload, Script, Source

__all__ = [
    "Article",
    "CorpusSnapshot",
    "CorpusStats",
    "FetchReport",
    "Query",
    "RawPayload",
    "ScoredArticle",
    "Script",
    "SearchResult",
    "Source",
    "make_article_id",
]
