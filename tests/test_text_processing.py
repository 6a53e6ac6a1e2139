"""Test query normalization and digest helpers."""

import pytest

from service_search.utils.text_processing import DIGEST_SEPARATOR, TextProcessor, normalize


class TestNormalize:
    """Test the query normalizer."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("身份证到期了", "身份证到期"),
            ("我要办理公积金提取", "公积金提取"),
            ("怎么查询社保？", "社保"),
            ("想生孩子", "生孩子"),
            ("我想要居民身份证到期换领", "居民身份证到期换领"),
            ("想要一下公积金提取", "公积金提取"),
            ("  ETC 办理 ", "etc"),
        ],
    )
    def test_strips_particles_and_noise(self, raw, expected):
        """Test that empty particles, spaces and punctuation are removed."""
        assert normalize(raw) == expected

    def test_preserves_character_order(self):
        """Test that remaining characters keep their order."""
        assert normalize("的居民了身份证吗") == "居民身份证"

    def test_only_particles_becomes_empty(self):
        """Test that a query made only of particles normalizes to empty."""
        assert normalize("我要办理了吗") == ""
        assert normalize("") == ""
        assert normalize("   ") == ""

    def test_lower_cases_latin_text(self):
        """Test lower-casing of mixed scripts."""
        assert normalize("PC端ETC") == "pc端etc"

    def test_custom_particles(self):
        """Test a processor with its own particle list."""
        processor = TextProcessor(particles=["申请"])
        assert processor.normalize("申请公积金了") == "公积金了"


class TestDigestHelpers:
    """Test digest construction and character coverage."""

    def test_build_digest(self):
        """Test digest joins non-empty lower-cased fields."""
        processor = TextProcessor()
        digest = processor.build_digest("ETC办理", "", "民生保障")
        assert digest == f"etc办理{DIGEST_SEPARATOR}民生保障"

    def test_character_coverage(self):
        """Test coverage of distinct query characters."""
        assert TextProcessor.character_coverage("身份证到期", "居民身份证损坏换领") == pytest.approx(0.6)
        assert TextProcessor.character_coverage("身份证到期", "居民身份证到期换领") == 1.0
        assert TextProcessor.character_coverage("", "任何") == 0.0

    def test_coverage_counts_distinct_characters(self):
        """Test repeated characters are counted once."""
        assert TextProcessor.character_coverage("证证明", "证件") == pytest.approx(0.5)
