"""Tests for NftPageParser and its helpers."""

from gift_resolver.scraper.parser import NftPageParser, clean_title, parse_quantity, strip_rarity


class TestStripRarity:
    def test_strips_percentage(self):
        assert strip_rarity("Gold 5.5%") == "Gold"
        assert strip_rarity("Onyx Black 2%") == "Onyx Black"

    def test_no_percentage(self):
        assert strip_rarity("Gold") == "Gold"

    def test_percentage_without_space_kept(self):
        assert strip_rarity("Gold5.5%") == "Gold5.5%"

    def test_empty(self):
        assert strip_rarity("   ") == ""


class TestParseQuantity:
    def test_separators(self):
        assert parse_quantity("1,234 / 10,000") == (1234, 10000)
        assert parse_quantity("14 046/14 278 issued") == (14046, 14278)

    def test_extra_separators_ignored(self):
        assert parse_quantity("1/2/3") == (1, 2)

    def test_no_slash(self):
        assert parse_quantity("1234 issued") == (0, 0)
        assert parse_quantity("") == (0, 0)


class TestCleanTitle:
    def test_truncates_hash_suffix(self):
        assert clean_title("Kissed Frog #3639") == "Kissed Frog"

    def test_normalizes_whitespace(self):
        assert clean_title("Plush\tPepe\n #1") == "Plush Pepe"

    def test_leading_hash_kept(self):
        assert clean_title("#Hashtag") == "#Hashtag"


class TestNftPageParser:
    def setup_method(self):
        self.parser = NftPageParser()

    def test_parse_sample_page(self, nft_html):
        result = self.parser.parse(nft_html, "PlushPepe-42")
        assert result is not None
        assert result.slug == "PlushPepe-42"
        assert result.gift_title == "Plush Pepe"
        assert result.serial_number == 42
        assert result.owner == "Pepe & Friends"
        assert result.model == "Ninja Mike"
        assert result.backdrop == "Onyx Black"
        assert result.pattern == "Illuminati"
        assert result.issued_count == 2841
        assert result.total_supply == 2857

    def test_missing_item_page_is_absent(self, missing_html):
        assert self.parser.parse(missing_html, "PlushPepe-999999") is None

    def test_empty_string(self):
        assert self.parser.parse("", "PlushPepe-1") is None

    def test_malformed_slug(self, nft_html):
        assert self.parser.parse(nft_html, "PlushPepe") is None

    def test_model_and_quantity_only(self, page_builder):
        html = page_builder(rows={"Model": "Golden 3.1%", "Quantity": "120 / 1000"})
        result = self.parser.parse(html, "Desk-Clock-7")
        assert result is not None
        assert result.gift_title == "Desk-Clock"
        assert result.model == "Golden"
        assert result.backdrop == ""
        assert result.pattern == ""
        assert result.owner == ""
        assert result.issued_count == 120
        assert result.total_supply == 1000

    def test_description_fills_missing_traits(self, page_builder):
        html = page_builder(
            rows={"Model": "Golden 3.1%"},
            description="Model: Silver&#10;Backdrop: Navy 1.5%&#10;Symbol: Star",
        )
        result = self.parser.parse(html, "DeskClock-7")
        assert result is not None
        assert result.model == "Golden"  # table wins over description
        assert result.backdrop == "Navy"
        assert result.pattern == "Star"

    def test_description_only(self, page_builder):
        html = page_builder(description="Backdrop: Navy&#10;Symbol: Star")
        result = self.parser.parse(html, "DeskClock-7")
        assert result is not None
        assert result.model == ""
        assert result.backdrop == "Navy"

    def test_quantity_only_is_present(self, page_builder):
        result = self.parser.parse(page_builder(rows={"Quantity": "5/10"}), "DeskClock-7")
        assert result is not None
        assert (result.issued_count, result.total_supply) == (5, 10)

    def test_owner_only_is_absent(self, page_builder):
        assert self.parser.parse(page_builder(rows={"Owner": "someone"}), "DeskClock-7") is None

    def test_og_title_overrides_slug(self, page_builder):
        html = page_builder(rows={"Model": "Golden"}, og_title="Desk Clock #7")
        result = self.parser.parse(html, "DeskClock-7")
        assert result.gift_title == "Desk Clock"

    def test_html_entities_and_tags_stripped(self, page_builder):
        html = page_builder(rows={"Model": "<b>Tom &amp; Jerry</b> <mark>0.5%</mark>"})
        result = self.parser.parse(html, "DeskClock-7")
        assert result.model == "Tom & Jerry"

    def test_deterministic(self, nft_html):
        first = self.parser.parse(nft_html, "PlushPepe-42")
        second = self.parser.parse(nft_html, "PlushPepe-42")
        assert first == second
        assert first.to_payload() == second.to_payload()
