"""Service record data model with import validation."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ApplicantType(str, Enum):
    """Who a service item is offered to."""
    CITIZEN = "自然人"
    LEGAL_ENTITY = "法人"
    UNKNOWN = "不确定"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "ApplicantType":
        """Map a free-text applicant label onto an applicant type."""
        if not label:
            return cls.UNKNOWN
        text = str(label).strip()
        lowered = text.lower()
        if lowered in ("legalentity", "legal_entity", "legal entity"):
            return cls.LEGAL_ENTITY
        if lowered == "citizen":
            return cls.CITIZEN
        if "法人" in text or "企业" in text or "组织" in text:
            return cls.LEGAL_ENTITY
        if "自然人" in text or "个人" in text or "居民" in text:
            return cls.CITIZEN
        return cls.UNKNOWN


# Markers used by the catalog for items valid across the whole province
PROVINCE_WIDE_MARKERS = ("全省通用", "全省", "省本级")

_CHANNEL_SPLIT = re.compile(r"[,，、;；/|]")
_THOUSANDS = re.compile(r"[,，_\s]")
_TRUE_LABELS = {"是", "yes", "y", "true", "1", "高频"}


@dataclass(frozen=True)
class ServiceRecord:
    """
    One government service item in the catalog.

    Attributes:
        code: Stable item code
        name: Display name
        short_name: Abbreviated name
        status: Publication status
        applicant_type: Citizen or legal entity
        category: Category tag
        region: Owning city/prefecture, or a province-wide marker
        channels: Distribution channels the item is published on
        high_frequency: Whether the item is flagged as high frequency
        satisfaction: Satisfaction score on a 0-10 scale, if known
        visit_count: Popularity counter
        tag: Free-text tag field
    """
    code: str
    name: str
    short_name: str = ""
    status: str = ""
    applicant_type: ApplicantType = ApplicantType.CITIZEN
    category: str = ""
    region: str = ""
    channels: FrozenSet[str] = field(default_factory=frozenset)
    high_frequency: bool = False
    satisfaction: Optional[float] = None
    visit_count: int = 0
    tag: str = ""

    def __post_init__(self) -> None:
        """Validate record after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Service record name cannot be empty")
        if isinstance(self.visit_count, bool) or not isinstance(self.visit_count, int):
            object.__setattr__(self, "visit_count", parse_visit_count(self.visit_count))
        if self.visit_count < 0:
            raise ValueError("Visit count cannot be negative")
        if not isinstance(self.channels, frozenset):
            object.__setattr__(self, "channels", frozenset(self.channels))

    @property
    def is_province_wide(self) -> bool:
        """True when the item is tagged as valid province-wide."""
        return any(marker in self.region for marker in PROVINCE_WIDE_MARKERS)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "name": self.name,
            "short_name": self.short_name,
            "status": self.status,
            "applicant_type": self.applicant_type.value,
            "category": self.category,
            "region": self.region,
            "channels": sorted(self.channels),
            "high_frequency": self.high_frequency,
            "satisfaction": self.satisfaction,
            "visit_count": self.visit_count,
            "tag": self.tag,
        }


def parse_visit_count(value: Any) -> int:
    """Parse a popularity counter, stripping thousands separators.

    Unparsable or negative values default to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if value == value else 0
    text = _THOUSANDS.sub("", str(value))
    if not text:
        return 0
    try:
        count = int(float(text))
    except (ValueError, OverflowError):
        return 0
    return max(count, 0)


def parse_satisfaction(value: Any) -> Optional[float]:
    """Parse a satisfaction score; anything outside 0-10 is treated as unknown."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().rstrip("分")
    if not text:
        return None
    try:
        score = float(text)
    except ValueError:
        return None
    if not 0.0 <= score <= 10.0:
        return None
    return score


def parse_channels(value: Any) -> FrozenSet[str]:
    """Split a delimited channel list into a set of channel names."""
    if value is None:
        return frozenset()
    if isinstance(value, (list, tuple, set, frozenset)):
        parts = [str(v) for v in value]
    else:
        parts = _CHANNEL_SPLIT.split(str(value))
    return frozenset(p.strip() for p in parts if p and p.strip())


class ServiceRecordModel(BaseModel):
    """Pydantic model validating one flat catalog import row.

    Accepts the catalog's Chinese column headers as aliases as well as the
    English field names.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str = Field("", alias="事项编码", description="Item code")
    name: str = Field("", alias="事项名称", description="Display name")
    short_name: str = Field("", alias="事项简称")
    status: str = Field("", alias="状态")
    applicant_type: ApplicantType = Field(ApplicantType.CITIZEN, alias="服务对象")
    category: str = Field("", alias="事项分类")
    region: str = Field("", alias="所属市州单位")
    channels: FrozenSet[str] = Field(default_factory=frozenset, alias="发布渠道")
    high_frequency: bool = Field(False, alias="是否高频事项")
    satisfaction: Optional[float] = Field(None, alias="满意度")
    visit_count: int = Field(0, alias="访问量")
    tag: str = Field("", alias="事项标签")

    @model_validator(mode="before")
    @classmethod
    def apply_column_fallbacks(cls, data: Any) -> Any:
        """Resolve alternate headers before field validation."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Older exports name the popularity column 搜索量
        if "访问量" not in data and "visit_count" not in data and "搜索量" in data:
            data["访问量"] = data["搜索量"]
        # 申请人 carries the applicant type when 服务对象 is absent
        if "服务对象" not in data and "applicant_type" not in data and "申请人" in data:
            data["服务对象"] = data["申请人"]
        return data

    @field_validator(
        "code", "name", "short_name", "status", "category", "region", "tag",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """Coerce missing or non-string cells to stripped text."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("applicant_type", mode="before")
    @classmethod
    def coerce_applicant(cls, v: Any) -> ApplicantType:
        """Records are either for legal entities or for citizens."""
        if isinstance(v, ApplicantType):
            applicant = v
        else:
            applicant = ApplicantType.from_label(v)
        if applicant is ApplicantType.LEGAL_ENTITY:
            return applicant
        return ApplicantType.CITIZEN

    @field_validator("channels", mode="before")
    @classmethod
    def split_channels(cls, v: Any) -> FrozenSet[str]:
        return parse_channels(v)

    @field_validator("high_frequency", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        if v is None:
            return False
        return str(v).strip().lower() in _TRUE_LABELS

    @field_validator("satisfaction", mode="before")
    @classmethod
    def validate_satisfaction(cls, v: Any) -> Optional[float]:
        return parse_satisfaction(v)

    @field_validator("visit_count", mode="before")
    @classmethod
    def validate_visit_count(cls, v: Any) -> int:
        """Strip thousands separators; unparsable counts become 0."""
        return parse_visit_count(v)

    def to_record(self) -> ServiceRecord:
        """Convert to ServiceRecord dataclass.

        A row without a name falls back to its code as display name.
        """
        return ServiceRecord(
            code=self.code,
            name=self.name or self.code,
            short_name=self.short_name,
            status=self.status,
            applicant_type=self.applicant_type,
            category=self.category,
            region=self.region,
            channels=self.channels,
            high_frequency=self.high_frequency,
            satisfaction=self.satisfaction,
            visit_count=self.visit_count,
            tag=self.tag,
        )
