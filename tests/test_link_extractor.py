# File: tests/test_link_extractor.py
from sponge.crawler.link_extractor import extract_links
from sponge.crawler.models import FetchResponse
from sponge.uri import CanonicalUri


def response(body: str, uri: str = "https://test.com/dir/page.html") -> FetchResponse:
    return FetchResponse("text/html", body, CanonicalUri.parse(uri))


def test_extracts_resolved_unique_links():
    body = """
        <html><body>
            <a href="/a.txt">A</a>
            <a href="b.txt">B</a>
            <a href="https://www.test.com/a.txt#top">A again</a>
            <a href="https://elsewhere.org/x">X</a>
            <a>no href</a>
        </body></html>
    """
    links = extract_links(response(body))

    assert links == {
        CanonicalUri.parse("https://test.com/a.txt"),
        CanonicalUri.parse("https://test.com/dir/b.txt"),
        CanonicalUri.parse("https://elsewhere.org/x"),
    }


def test_invalid_links_are_dropped():
    body = '<a href="mailto:me@test.com">M</a><a href="javascript:void(0)">J</a><a href="  ">E</a>'
    assert extract_links(response(body)) == set()


def test_base_href_is_honoured():
    body = '<html><head><base href="/static/"></head><body><a href="f.pdf">F</a></body></html>'
    assert extract_links(response(body)) == {CanonicalUri.parse("https://test.com/static/f.pdf")}


def test_empty_body():
    assert extract_links(FetchResponse("text/html", None, CanonicalUri.parse("https://test.com"))) == set()
