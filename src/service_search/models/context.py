"""Query context filters chosen by the user for one search turn."""

from dataclasses import dataclass, replace
from typing import Optional

from .intent import AnalyzedIntent
from .record import ApplicantType

# UI labels meaning "no filter"
ALL_LABELS = {"", "全部", "全部角色", "全省", "全省范围", "全部渠道", "all", "any"}


def _is_all(label: Optional[str]) -> bool:
    return label is None or str(label).strip().lower() in ALL_LABELS


@dataclass(frozen=True)
class QueryContext:
    """
    User-selected context for a search turn.

    Frozen so that a context captured at the start of a turn cannot be
    changed underneath a scoring pass.

    Attributes:
        applicant_type: Applicant filter (None = all applicants)
        region: Region filter (None = all regions)
        channel: Channel filter (None = all channels)
        satisfaction_weighted: Whether satisfaction contributes to the score
    """
    applicant_type: Optional[ApplicantType] = None
    region: Optional[str] = None
    channel: Optional[str] = None
    satisfaction_weighted: bool = False

    def __post_init__(self) -> None:
        """Validate context values."""
        if self.applicant_type is ApplicantType.UNKNOWN:
            raise ValueError("Applicant filter must be citizen, legal entity or None")
        if self.region is not None and not self.region.strip():
            raise ValueError("Region filter cannot be blank; use None for all regions")
        if self.channel is not None and not self.channel.strip():
            raise ValueError("Channel filter cannot be blank; use None for all channels")

    @classmethod
    def from_labels(
        cls,
        applicant: Optional[str] = None,
        region: Optional[str] = None,
        channel: Optional[str] = None,
        satisfaction_weighted: bool = False,
    ) -> "QueryContext":
        """Build a context from UI selector labels such as 全部 or 全省."""
        applicant_type = None
        if not _is_all(applicant):
            applicant_type = ApplicantType.from_label(applicant)
            if applicant_type is ApplicantType.UNKNOWN:
                applicant_type = None
        return cls(
            applicant_type=applicant_type,
            region=None if _is_all(region) else str(region).strip(),
            channel=None if _is_all(channel) else str(channel).strip(),
            satisfaction_weighted=satisfaction_weighted,
        )

    def with_intent(self, intent: AnalyzedIntent) -> "QueryContext":
        """Adopt the intent's applicant type and location for unset filters."""
        updates = {}
        if self.applicant_type is None and intent.applicant_type is not ApplicantType.UNKNOWN:
            updates["applicant_type"] = intent.applicant_type
        if self.region is None and intent.location:
            updates["region"] = intent.location
        if not updates:
            return self
        return replace(self, **updates)
