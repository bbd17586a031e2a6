from .services import NewsAggregator, SearchSession

__all__ = ["NewsAggregator", "SearchSession"]
