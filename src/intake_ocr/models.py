"""
問診票OCR解析のデータモデル

候補（Candidate）は1回の解析中だけ保持される一時データ。
StructuredRecord は解析結果で、返却後に変更されない。
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# 氏名が読み取れなかった場合の代替値（保存層が空の氏名を受け付けないため）
NAME_PLACEHOLDER = "OCR読み取り"


class SourceType(str, Enum):
    """来店きっかけ"""

    STOREFRONT = "storefront"
    INSTAGRAM_STORE = "instagram_store"
    INSTAGRAM_PERSONAL = "instagram_personal"
    HOTPEPPER = "hotpepper"
    YOUTUBE = "youtube"
    GOOGLE = "google"
    TIKTOK = "tiktok"
    REFERRAL = "referral"

    @property
    def label(self) -> str:
        return _SOURCE_TYPE_LABELS[self]

    @classmethod
    def from_value(cls, value: Any) -> Optional["SourceType"]:
        """文字列/列挙値から SourceType を得る（不明値は None）"""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


_SOURCE_TYPE_LABELS = {
    SourceType.STOREFRONT: "店頭",
    SourceType.INSTAGRAM_STORE: "Instagram（お店のアカウント）",
    SourceType.INSTAGRAM_PERSONAL: "Instagram（個人アカウント）",
    SourceType.HOTPEPPER: "ホットペッパー",
    SourceType.YOUTUBE: "YouTube",
    SourceType.GOOGLE: "Google",
    SourceType.TIKTOK: "TikTok",
    SourceType.REFERRAL: "ご紹介",
}


@dataclass(frozen=True)
class Candidate:
    """1行から得られた未確定の抽出候補"""

    text: str
    line_index: int
    is_near_anchor: bool
    # 分割用の元の行（ふりがなは空白を除去して text に格納するため）
    line: str = ""

    @property
    def source_line(self) -> str:
        return self.line or self.text


@dataclass(frozen=True)
class AddressCandidate:
    text: str
    line_index: int
    matched_by: Tuple[str, ...] = ()


@dataclass
class CandidatePool:
    """1回の走査で収集された型別の候補一式"""

    lines: List[str] = field(default_factory=list)
    anchor_index: Optional[int] = None
    names: List[Candidate] = field(default_factory=list)
    furiganas: List[Candidate] = field(default_factory=list)
    addresses: List[AddressCandidate] = field(default_factory=list)
    phones: List[str] = field(default_factory=list)
    postal_codes: List[str] = field(default_factory=list)
    referral_persons: List[str] = field(default_factory=list)
    birth_date: Optional[Tuple[int, int, int]] = None

    def add_address(self, text: str, line_index: int, route: str) -> None:
        """住所候補を追加（同一文字列は経路のみ追記）"""
        for i, existing in enumerate(self.addresses):
            if existing.text == text:
                if route not in existing.matched_by:
                    self.addresses[i] = AddressCandidate(
                        existing.text, existing.line_index, existing.matched_by + (route,)
                    )
                return
        self.addresses.append(AddressCandidate(text, line_index, (route,)))


@dataclass(frozen=True)
class SourceDetectionResult:
    source_type: Optional[SourceType] = None
    instagram_account: Optional[str] = None
    referral_person: Optional[str] = None
    # "checkbox" | "fallback" | None
    detected_by: Optional[str] = None


@dataclass(frozen=True)
class StructuredRecord:
    """OCRテキストから再構成した顧客レコード（全項目任意）

    欠損は「人による入力が必要」を意味し、既定値として扱ってはならない。
    """

    name: Optional[str] = None
    furigana: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name_furigana: Optional[str] = None
    first_name_furigana: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    birth_year: Optional[int] = None
    birth_month: Optional[int] = None
    birth_day: Optional[int] = None
    source_type: Optional[SourceType] = None
    instagram_account: Optional[str] = None
    referral_person: Optional[str] = None
    has_scalp_sensitivity: Optional[bool] = None
    name_is_placeholder: bool = False

    @classmethod
    def field_names(cls) -> List[str]:
        """出力対象の項目名（内部フラグを除く）"""
        return [f.name for f in fields(cls) if f.name != "name_is_placeholder"]

    def to_dict(self) -> Dict[str, Any]:
        """欠損項目を省いた辞書へ変換"""
        out: Dict[str, Any] = {}
        for key in self.field_names():
            value = getattr(self, key)
            if value is None:
                continue
            if isinstance(value, SourceType):
                value = value.value
            out[key] = value
        return out
