"""Tests for merchant detection from product URLs."""

import pytest

from pricewatch.scrapers.platform import MerchantId, PLATFORM_RULES, detect_platform


class TestDetectPlatform:
    """Tests for detect_platform."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.amazon.in/dp/B0CS5XW6TN", MerchantId.AMAZON),
            ("https://amzn.to/abc", MerchantId.UNKNOWN),
            ("https://www.flipkart.com/apple-iphone-15/p/itm6ac6485515ae4", MerchantId.FLIPKART),
            ("https://www.myntra.com/tshirts/roadster/123/buy", MerchantId.MYNTRA),
            ("https://www.ajio.com/p/469581372_black", MerchantId.AJIO),
            ("https://www.snapdeal.com/product/x/123", MerchantId.SNAPDEAL),
            ("https://www.tatacliq.com/p-mp000000017", MerchantId.TATACLIQ),
            ("https://www.nykaa.com/lakme/p/123", MerchantId.NYKAA),
            ("https://www.meesho.com/s/p/4x1x", MerchantId.MEESHO),
            ("https://www.jiomart.com/p/groceries/590000", MerchantId.JIOMART),
            ("https://www.croma.com/apple-iphone-15/p/300652", MerchantId.CROMA),
            ("https://www.reliancedigital.in/apple-iphone-15/p/493839", MerchantId.RELIANCE_DIGITAL),
        ],
    )
    def test_known_merchants(self, url, expected):
        """Test each merchant's product URL maps to its identifier."""
        assert detect_platform(url) == expected

    def test_case_insensitive(self):
        """Test detection ignores URL case."""
        assert detect_platform("https://WWW.AMAZON.IN/dp/B0CS5XW6TN") == MerchantId.AMAZON
        assert detect_platform("HTTPS://WWW.FlipKart.COM/item") == MerchantId.FLIPKART

    def test_unknown_host(self):
        """Test an unsupported shop yields unknown."""
        assert detect_platform("https://shop.example.org/products/42") == MerchantId.UNKNOWN

    def test_empty_url(self):
        """Test empty input yields unknown instead of raising."""
        assert detect_platform("") == MerchantId.UNKNOWN
        assert detect_platform(None) == MerchantId.UNKNOWN

    def test_first_matching_rule_wins(self):
        """Test a URL mentioning two merchants resolves by rule order."""
        url = "https://www.flipkart.com/search?q=amazon+echo"
        assert detect_platform(url) == MerchantId.AMAZON

    def test_rules_cover_every_known_merchant(self):
        """Test every merchant except unknown has a detection rule."""
        covered = {merchant for _, merchant in PLATFORM_RULES}
        assert covered == set(MerchantId) - {MerchantId.UNKNOWN}
