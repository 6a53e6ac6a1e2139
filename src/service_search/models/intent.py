"""Intent classification results consumed by the scorer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .record import ApplicantType

# Location answers that carry no regional restriction
_NO_LOCATION = {"", "null", "none", "全省", "全省通用", "不确定", "未知"}


class DegradedReason(str, Enum):
    """Why a classification fell back to literal-only scoring."""
    NO_CREDENTIALS = "no_credentials"
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    PARSE = "parse"


@dataclass(frozen=True)
class AnalyzedIntent:
    """
    Semantic expansion extracted from a query by the intent service.

    Attributes:
        keywords: Extracted keywords, in service order
        synonyms: Synonym / paraphrase terms, in service order
        applicant_type: Applicant guess (UNKNOWN when unsure)
        location: Location guess, if any
        intent_category: Coarse intent label (query, apply, complain, ...)
    """
    keywords: Tuple[str, ...] = ()
    synonyms: Tuple[str, ...] = ()
    applicant_type: ApplicantType = ApplicantType.UNKNOWN
    location: Optional[str] = None
    intent_category: Optional[str] = None

    @classmethod
    def empty(cls) -> "AnalyzedIntent":
        """The intent used when classification is unavailable."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return (
            not self.keywords
            and not self.synonyms
            and self.applicant_type is ApplicantType.UNKNOWN
            and self.location is None
        )

    @property
    def expansion_terms(self) -> List[str]:
        """Lower-cased synonyms then keywords, de-duplicated, blanks dropped."""
        terms: List[str] = []
        seen = set()
        for term in self.synonyms + self.keywords:
            cleaned = term.strip().lower()
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                terms.append(cleaned)
        return terms


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of one intent classification call.

    Either a usable intent, or the empty intent plus the reason the call
    degraded.
    """
    intent: AnalyzedIntent
    degraded_reason: Optional[DegradedReason] = None

    @property
    def is_degraded(self) -> bool:
        return self.degraded_reason is not None

    @classmethod
    def ok(cls, intent: AnalyzedIntent) -> "ClassificationResult":
        return cls(intent=intent)

    @classmethod
    def degraded(cls, reason: DegradedReason) -> "ClassificationResult":
        return cls(intent=AnalyzedIntent.empty(), degraded_reason=reason)


class IntentResponseModel(BaseModel):
    """Pydantic model validating the JSON object returned by the intent service."""

    keywords: List[str] = Field(default_factory=list)
    synonyms: List[str] = Field(default_factory=list)
    target_user: str = Field("不确定", description="法人, 自然人 or 不确定")
    location: Optional[str] = None
    intent_category: Optional[str] = None

    @field_validator("keywords", "synonyms", mode="before")
    @classmethod
    def coerce_terms(cls, v: Any) -> List[str]:
        """Accept a single string or a list; drop non-text entries."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(t).strip() for t in v if isinstance(t, (str, int, float)) and str(t).strip()]

    @field_validator("target_user", mode="before")
    @classmethod
    def coerce_target_user(cls, v: Any) -> str:
        return "不确定" if v is None else str(v).strip()

    @field_validator("location", "intent_category", mode="before")
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    def to_intent(self) -> AnalyzedIntent:
        """Convert to AnalyzedIntent dataclass."""
        location = self.location
        if location is not None and location.lower() in _NO_LOCATION:
            location = None
        applicant = ApplicantType.UNKNOWN
        if self.target_user == ApplicantType.LEGAL_ENTITY.value:
            applicant = ApplicantType.LEGAL_ENTITY
        elif self.target_user == ApplicantType.CITIZEN.value:
            applicant = ApplicantType.CITIZEN
        return AnalyzedIntent(
            keywords=tuple(self.keywords),
            synonyms=tuple(self.synonyms),
            applicant_type=applicant,
            location=location,
            intent_category=self.intent_category,
        )
