from __future__ import annotations

from pathlib import Path

import orjson

from .models.source import Script, Source

DEFAULT_SOURCES: tuple[Source, ...] = (
    Source(name="BBC", endpoint="https://feeds.bbci.co.uk/news/rss.xml", script=Script.LATIN),
    Source(name="Reuters", endpoint="https://feeds.reuters.com/reuters/topNews", script=Script.LATIN),
    Source(name="CNN", endpoint="http://rss.cnn.com/rss/edition.rss", script=Script.LATIN),
    Source(name="Guardian", endpoint="https://www.theguardian.com/world/rss", script=Script.LATIN),
    Source(name="AP", endpoint="https://apnews.com/apf-topnews?output=rss", script=Script.LATIN),
    Source(name="NPR News", endpoint="https://feeds.npr.org/1001/rss.xml", script=Script.LATIN),
    Source(name="Ynet", endpoint="https://www.ynet.co.il/Integration/StoryRss2.xml", script=Script.HEBREW),
    Source(name="Walla", endpoint="https://rss.walla.co.il/feed/1?type=main", script=Script.HEBREW),
    Source(name="Israel Hayom", endpoint="https://www.israelhayom.co.il/rss", script=Script.HEBREW),
    Source(
        name="Globes",
        endpoint="https://www.globes.co.il/webservice/rss/rssfeeder.asmx/FeederNode?iID=1225",
        script=Script.HEBREW,
    ),
)


def load_sources(path: str | Path) -> tuple[Source, ...]:
    """Read a JSON list of ``{name, endpoint, script}`` descriptors."""
    entries = orjson.loads(Path(path).read_bytes())
    return tuple(Source.model_validate(entry) for entry in entries)
