import pytest

from newsagg.errors import BlockedHostError
from newsagg.security import ensure_public_url
from newsagg.services.common import (
    extract_image_from_markup,
    has_non_latin_letters,
    is_hebrew,
    is_valid_image_url,
    normalize_url,
    parse_datetime,
    strip_markup,
)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://cdn.example.com/x.jpg?w=300", True),
        ("https://cdn.example.com/path/photo.JPEG", True),
        ("http://cdn.example.com/a.webp", True),
        ("https://cdn.example.com/x", False),
        ("https://cdn.example.com/x.jpg.html", False),
        ("//cdn.example.com/x.png", False),
        ("ftp://cdn.example.com/x.png", False),
        ("/relative/x.png", False),
        ("", False),
        (None, False),
    ],
)
def test_image_validator(url, expected) -> None:
    assert is_valid_image_url(url) is expected


def test_extract_image_from_markup() -> None:
    markup = '<p>Intro</p><img class="lead" src="https://img.example/a.png" alt="">'

    assert extract_image_from_markup(markup) == "https://img.example/a.png"
    assert extract_image_from_markup("<p>No image</p>") is None
    assert extract_image_from_markup(None) is None


def test_extract_image_from_markup_reads_src_attribute_only() -> None:
    lazy = '<img src="https://x.example/a.png" data-src="https://x.example/b.jpg">'

    assert extract_image_from_markup(lazy) == "https://x.example/a.png"
    assert extract_image_from_markup("<IMG SRC=https://x.example/c.jpg>") == "https://x.example/c.jpg"
    assert extract_image_from_markup('<img data-src="https://x.example/b.jpg">') is None


def test_strip_markup() -> None:
    assert strip_markup("<div><p>Hello&nbsp;<em>world</em></p>\n\n</div>") == "Hello world"
    assert strip_markup("  plain   text ") == "plain text"
    assert strip_markup(None) == ""


def test_parse_datetime_normalizes_to_utc() -> None:
    parsed = parse_datetime("Mon, 19 Oct 2026 10:00:00 +0300")

    assert parsed is not None
    assert parsed.utcoffset().total_seconds() == 0
    assert parsed.hour == 7
    assert parse_datetime("not a date") is None
    assert parse_datetime(None) is None


def test_normalize_url() -> None:
    assert normalize_url("HTTPS://WWW.Example.com/a/?utm_campaign=x&id=3#top") == (
        "https://example.com/a?id=3"
    )


def test_script_detection() -> None:
    assert has_non_latin_letters("ירושלים")
    assert has_non_latin_letters("Москва")
    assert not has_non_latin_letters("Zürich café 2026")
    assert is_hebrew("חדשות today")
    assert not is_hebrew("news")


@pytest.mark.parametrize(
    "url",
    [
        "http://localhost/feed",
        "http://api.localhost/feed",
        "http://127.0.0.1:8080/",
        "http://10.1.2.3/",
        "http://172.16.0.1/",
        "http://172.31.255.255/",
        "http://192.168.1.10/",
        "http://169.254.169.254/latest/meta-data",
        "http://[::1]/",
        "http://0.0.0.0/",
        "file:///etc/passwd",
        "https:///no-host",
    ],
)
def test_blocked_targets(url) -> None:
    with pytest.raises(BlockedHostError):
        ensure_public_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://feeds.bbci.co.uk/news/rss.xml",
        "http://172.32.0.1/",
        "https://8.8.8.8/dns",
    ],
)
def test_public_targets(url) -> None:
    assert ensure_public_url(url) == url
