"""Tests for digest email rendering and sending."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import requests

from competitor_intel.email_delivery import (
    format_digest_subject,
    render_digest_html,
    send_digest_email,
)
from competitor_intel.models import Competitor, DigestGroup, Signal


def _signal(signal_id, title="Acme launches Rocket", signal_type="product_launch", **kwargs) -> Signal:
    return Signal(
        id=signal_id,
        competitor_id=1,
        user_id=1,
        title=title,
        summary="A new product.",
        signal_type=signal_type,
        source_url=f"https://news.example/{signal_id}",
        content_hash=f"hash-{signal_id}",
        **kwargs,
    )


def _groups() -> list:
    return [
        DigestGroup(
            competitor=Competitor(id=1, user_id=1, name="Acme"),
            signals=[_signal(1, sentiment="positive", is_high_priority=True)],
        ),
        DigestGroup(
            competitor=Competitor(id=2, user_id=1, name="Globex"),
            signals=[_signal(2, title="Globex hires CFO", signal_type="leadership_change")],
        ),
    ]


class TestFormatDigestSubject:
    """Tests for format_digest_subject function."""

    def test_singular(self):
        assert format_digest_subject(1) == "Competitor Intelligence Digest - 1 New Signal"

    def test_plural(self):
        assert format_digest_subject(3) == "Competitor Intelligence Digest - 3 New Signals"


class TestRenderDigestHtml:
    """Tests for render_digest_html function."""

    def test_contains_competitors_and_signals(self):
        """Test that every competitor section and signal is rendered."""
        html = render_digest_html(_groups(), now=datetime(2024, 1, 15, 9, 0))

        assert "Monday, January 15, 2024" in html
        assert "Acme" in html
        assert "Globex hires CFO" in html
        assert "product launch" in html
        assert "leadership change" in html
        assert "High Priority" in html
        assert "badge-positive" in html
        assert 'href="https://news.example/1"' in html

    def test_escapes_article_text(self):
        """Test that HTML in titles is escaped."""
        groups = [DigestGroup(
            competitor=Competitor(id=1, user_id=1, name="Acme"),
            signals=[_signal(1, title="<script>alert(1)</script>")],
        )]

        html = render_digest_html(groups)

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_skips_empty_groups(self):
        """Test that a competitor with no signals gets no section."""
        groups = [DigestGroup(competitor=Competitor(id=3, user_id=1, name="Initech"))]

        html = render_digest_html(groups)

        assert "Initech" not in html


class TestSendDigestEmail:
    """Tests for send_digest_email function."""

    @patch("competitor_intel.email_delivery.requests.post")
    def test_no_signals_is_success_without_request(self, mock_post):
        assert send_digest_email("analyst@example.com", [], api_key="key") is True
        mock_post.assert_not_called()

    @patch("competitor_intel.email_delivery.get_resend_api_key", return_value=None)
    @patch("competitor_intel.email_delivery.requests.post")
    def test_missing_api_key_fails(self, mock_post, mock_key):
        assert send_digest_email("analyst@example.com", _groups()) is False
        mock_post.assert_not_called()

    @patch("competitor_intel.email_delivery.requests.post")
    def test_sends_message(self, mock_post):
        """Test the request sent to the email provider."""
        mock_post.return_value = MagicMock(status_code=200)

        assert send_digest_email("analyst@example.com", _groups(), api_key="key", timeout=5) is True

        _, kwargs = mock_post.call_args
        assert kwargs["headers"] == {"Authorization": "Bearer key"}
        assert kwargs["timeout"] == 5
        message = kwargs["json"]
        assert message["to"] == ["analyst@example.com"]
        assert message["subject"] == "Competitor Intelligence Digest - 2 New Signals"
        assert "Acme" in message["html"]

    @patch("competitor_intel.email_delivery.requests.post")
    def test_provider_error_fails(self, mock_post):
        """Test that a rejected request is reported as a failed send."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("422 Unprocessable")
        mock_post.return_value = response

        assert send_digest_email("analyst@example.com", _groups(), api_key="key") is False

    @patch("competitor_intel.email_delivery.requests.post")
    def test_network_error_fails(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("unreachable")

        assert send_digest_email("analyst@example.com", _groups(), api_key="key") is False
