"""Tests for tempmail.challenge."""

from __future__ import annotations

from tempmail.challenge import is_challenge

from .conftest import CHALLENGE_BODY


class TestIsChallenge:
    def test_cloudflare_interstitial(self):
        assert is_challenge(503, {"server": "cloudflare"}, CHALLENGE_BODY)

    def test_forbidden_interstitial(self):
        assert is_challenge(403, {"server": "cloudflare"}, '<form id="challenge-form" action="/cdn-cgi/challenge-platform/">')

    def test_mitigated_header(self):
        assert is_challenge(403, {"cf-mitigated": "challenge"}, "")

    def test_success_status_never_challenge(self):
        assert not is_challenge(200, {"server": "cloudflare"}, CHALLENGE_BODY)

    def test_plain_server_error(self):
        assert not is_challenge(503, {"server": "nginx"}, CHALLENGE_BODY)

    def test_cloudflare_error_without_marker(self):
        assert not is_challenge(503, {"server": "cloudflare"}, "<h1>Service unavailable</h1>")

    def test_not_found(self):
        assert not is_challenge(404, {"server": "cloudflare"}, CHALLENGE_BODY)
