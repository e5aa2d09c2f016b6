import unittest
from dataclasses import dataclass

from tagquery.lib.tags import query_field
from tagquery.lib.url import append_query, encode_query, force_https, full_path


@dataclass
class Page:
    limit: int = query_field("limit,omitempty", default=0)
    tags: list = query_field("tags,del:comma", default_factory=list)


class TestFullPath(unittest.TestCase):
    def test_full_path(self):
        tests = [
            ("https://www.example.com", "page", "https://www.example.com/page"),
            ("https://www.example.com", "page?limit=0", "https://www.example.com/page?limit=0"),
            ("https://www.example.com/", "/page", "https://www.example.com/page"),
            ("https://www.example.com/", "/page?limit=0", "https://www.example.com/page?limit=0"),
            ("https://www.example.com/", "https://www.example.com/page?limit=0", "https://www.example.com/page?limit=0"),
            ("http://www.example.com/", "http://www.example.com/page?limit=0", "http://www.example.com/page?limit=0"),
            ("http://www.example.org/", "http://www.example.com/page?limit=0", "http://www.example.com/page?limit=0"),
            ("", "/page", "/page"),
        ]

        for endpoint, path, want in tests:
            with self.subTest(endpoint=endpoint, path=path):
                self.assertEqual(full_path(endpoint, path), want)

    def test_force_https(self):
        self.assertEqual(force_https("http://api.example.com"), "https://api.example.com")
        self.assertEqual(force_https("api.example.com/v4"), "https://api.example.com/v4")
        self.assertEqual(force_https("https://api.example.com"), "https://api.example.com")


class TestEncodeQuery(unittest.TestCase):
    def test_none(self):
        self.assertEqual(encode_query(None), "")

    def test_string_passthrough(self):
        self.assertEqual(encode_query("?b=2&a=1"), "b=2&a=1")
        self.assertEqual(encode_query(b"b=2&a=1"), "b=2&a=1")

    def test_empty_string(self):
        self.assertEqual(encode_query(""), "")

    def test_record(self):
        self.assertEqual(encode_query(Page(limit=10, tags=["x", "y"])), "limit=10&tags=x%2Cy")


class TestAppendQuery(unittest.TestCase):
    def test_no_existing_query(self):
        self.assertEqual(
            append_query("https://api.example.com/projects", Page(limit=5)),
            "https://api.example.com/projects?limit=5",
        )

    def test_existing_query(self):
        self.assertEqual(
            append_query("https://api.example.com/projects?page=2", {"per_page": "20"}),
            "https://api.example.com/projects?page=2&per_page=20",
        )

    def test_fragment_kept(self):
        self.assertEqual(
            append_query("https://example.com/p?a=1#top", ["b", "2"]),
            "https://example.com/p?a=1&b=2#top",
        )

    def test_empty_query(self):
        url = "https://example.com/p?a=1"

        self.assertEqual(append_query(url, None), url)
        self.assertEqual(append_query(url, Page()), url)
