"""Tests for content hashing."""

from competitor_intel.hashing import article_content_hash, generate_content_hash
from competitor_intel.models import NewsArticle


class TestGenerateContentHash:
    """Tests for generate_content_hash function."""

    def test_is_deterministic(self):
        """Test that the same input always gives the same hash."""
        text = "Acme raises $50M Series Bhttps://news.example/acme"
        assert generate_content_hash(text) == generate_content_hash(text)

    def test_fixed_length_hex(self):
        """Test that hashes are 32 hex characters regardless of input size."""
        for text in ["", "a", "x" * 10_000, "Überraschung 🚀"]:
            result = generate_content_hash(text)
            assert len(result) == 32
            assert all(c in "0123456789abcdef" for c in result)

    def test_different_inputs_differ(self):
        """Test that different inputs give different hashes."""
        assert generate_content_hash("Acme launches X") != generate_content_hash("Acme launches Y")

    def test_known_value(self):
        """Test against a known MD5 digest so stored hashes stay comparable."""
        assert generate_content_hash("") == "d41d8cd98f00b204e9800998ecf8427e"


class TestArticleContentHash:
    """Tests for article_content_hash function."""

    def test_hashes_title_then_url(self):
        """Test that an article is hashed on title followed by URL."""
        article = NewsArticle(
            title="Acme raises $50M Series B",
            url="https://news.example/acme",
            source="Example News",
            published_at=0,
        )
        expected = generate_content_hash("Acme raises $50M Series Bhttps://news.example/acme")
        assert article_content_hash(article) == expected

    def test_ignores_other_fields(self):
        """Test that description and source do not affect the hash."""
        a = NewsArticle(title="T", url="https://u", source="A", published_at=1, description="one")
        b = NewsArticle(title="T", url="https://u", source="B", published_at=2, description="two")
        assert article_content_hash(a) == article_content_hash(b)
