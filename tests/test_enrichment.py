import httpx
import pytest
import respx
from conftest import make_article

from newsagg.config import Settings
from newsagg.services.enrichment import ImageEnricher, extract_page_images


def page(head: str = "", body: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def test_extract_page_images_prefers_meta_then_content() -> None:
    html = page(
        '<meta property="og:image" content="/img/og.jpg">'
        '<meta name="twitter:image" content="https://cdn.site.example/tw.png">',
        '<article><img src="inline.gif"></article>',
    )

    assert extract_page_images(html, "https://site.example/news/1") == [
        "https://site.example/img/og.jpg",
        "https://cdn.site.example/tw.png",
        "https://site.example/news/inline.gif",
    ]


def test_acceptance_policy() -> None:
    enricher = ImageEnricher(settings=Settings(enrichment_cdn_patterns=["*.cloudfront.net"]))
    article_url = "https://www.site.example/news/1"

    assert enricher.is_acceptable("https://site.example/a.jpg", article_url)
    assert enricher.is_acceptable("https://d1.cloudfront.net/a", article_url)
    assert not enricher.is_acceptable("https://ads.other.example/a.jpg", article_url)
    assert not enricher.is_acceptable("data:image/png;base64,AAAA", article_url)


@pytest.mark.asyncio
async def test_enrich_backfills_missing_images() -> None:
    with_image = make_article("Has image", url="https://site.example/1", image="https://site.example/1.jpg")
    same_host = make_article("Same host", url="https://site.example/2")
    third_party = make_article("Third party", url="https://site.example/3")
    broken = make_article("Broken", url="https://site.example/4")

    settings = Settings(enrichment_cdn_patterns=[])
    async with httpx.AsyncClient() as client:
        enricher = ImageEnricher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://site.example/2").respond(
                200, html=page('<meta property="og:image" content="https://site.example/og2.jpg">')
            )
            mock.get("https://site.example/3").respond(
                200,
                html=page(
                    '<meta property="og:image" content="https://tracker.example/pixel.jpg">',
                    '<main><img src="/media/3.png"></main>',
                ),
            )
            mock.get("https://site.example/4").mock(side_effect=httpx.ConnectError("down"))
            enriched = await enricher.enrich([with_image, same_host, third_party, broken])

    assert [a.id for a in enriched] == [a.id for a in (with_image, same_host, third_party, broken)]
    assert enriched[0].image == "https://site.example/1.jpg"
    assert enriched[1].image == "https://site.example/og2.jpg"
    assert enriched[2].image == "https://site.example/media/3.png"
    assert enriched[3].image is None


@pytest.mark.asyncio
async def test_enrich_rejects_only_foreign_images() -> None:
    article = make_article("Foreign", url="https://site.example/5")
    async with httpx.AsyncClient() as client:
        enricher = ImageEnricher(settings=Settings(enrichment_cdn_patterns=[]), client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://site.example/5").respond(
                200, html=page('<meta property="og:image" content="https://elsewhere.example/x.jpg">')
            )
            enriched = await enricher.enrich([article])

    assert enriched[0].image is None


@pytest.mark.asyncio
async def test_enrich_refuses_redirect_to_metadata_service() -> None:
    article = make_article("Bounced", url="https://site.example/6")
    async with httpx.AsyncClient() as client:
        enricher = ImageEnricher(settings=Settings(enrichment_cdn_patterns=[]), client=client)
        with respx.mock(assert_all_called=False) as mock:
            mock.get("https://site.example/6").respond(
                302, headers={"Location": "http://169.254.169.254/latest/meta-data/"}
            )
            metadata = mock.get(url__startswith="http://169.254.169.254/").respond(
                200, html=page('<meta property="og:image" content="/secret.jpg">')
            )
            enriched = await enricher.enrich([article])

    assert not metadata.called
    assert enriched[0].image is None


@pytest.mark.asyncio
async def test_enrich_accepts_images_from_redirected_host() -> None:
    article = make_article("Mobile", url="https://site.example/7")
    async with httpx.AsyncClient() as client:
        enricher = ImageEnricher(settings=Settings(enrichment_cdn_patterns=[]), client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://site.example/7").respond(
                301, headers={"Location": "https://m.site-mobile.example/7"}
            )
            mock.get("https://m.site-mobile.example/7").respond(
                200, html=page('<meta property="og:image" content="/img/7.jpg">')
            )
            enriched = await enricher.enrich([article])

    assert enriched[0].image == "https://m.site-mobile.example/img/7.jpg"
