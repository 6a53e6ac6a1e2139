"""Text processing utilities for queries and catalog records."""

import re
from typing import Iterable, Tuple

# Particles that carry no meaning for matching a service item.
# Longer particles are removed first so that e.g. 我想要 is not split into 我想 + 要.
STOP_PARTICLES: Tuple[str, ...] = (
    "我想要", "我要", "我想", "想要", "怎么", "如何", "请问", "办理", "查询", "一下",
    "了", "是", "的", "吗", "呢", "啊", "想",
)

# Joins record fields inside a digest; never produced by normalize()
DIGEST_SEPARATOR = "\x1f"


class TextProcessor:
    """Text processing utilities for colloquial service queries."""

    def __init__(self, particles: Iterable[str] = STOP_PARTICLES):
        """Initialize text processor with the particles to strip."""
        self.particles = tuple(sorted(set(particles), key=len, reverse=True))

        self.particle_pattern = re.compile(
            "|".join(re.escape(p) for p in self.particles)
        ) if self.particles else None
        self.noise_pattern = re.compile(r"[\s　\x1f?？!！,，.。、;；:：\"'“”‘’()（）]+")

    def normalize(self, text: str) -> str:
        """
        Clean a raw query into its comparison form.

        Args:
            text: Raw query text

        Returns:
            Lower-cased query with whitespace, punctuation and empty
            particles removed; character order is preserved
        """
        if not text:
            return ""

        text = text.lower()
        text = self.noise_pattern.sub("", text)

        if self.particle_pattern is not None:
            text = self.particle_pattern.sub("", text)

        return text

    def build_digest(self, *fields: str) -> str:
        """Lower-cased concatenation of the given searchable fields."""
        return DIGEST_SEPARATOR.join(f.strip().lower() for f in fields if f and f.strip())

    @staticmethod
    def character_coverage(query: str, digest: str) -> float:
        """Fraction of the distinct characters of ``query`` present in ``digest``."""
        distinct = set(query)
        if not distinct:
            return 0.0
        present = sum(1 for ch in distinct if ch in digest)
        return present / len(distinct)


_default_processor = TextProcessor()


def normalize(raw: str) -> str:
    """Normalize a raw query with the default particle set."""
    return _default_processor.normalize(raw)
