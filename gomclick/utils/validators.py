import re
from datetime import date
from typing import Any, Dict, Mapping, Optional

from gomclick.errors import ValidationFailed


class TextValidator:
    """Checks for the free-text fields of forms (return location, reviews, boards)."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        return text is None or not text.strip()

    @staticmethod
    def sanitize_text(text: Optional[str]) -> str:
        if text is None:
            return ""
        # strip markup; content is shown as plain text
        return re.sub(r"<[^>]*>", "", text).strip()

    @staticmethod
    def require(field: str, text: Optional[str], label: str, max_length: Optional[int] = None) -> str:
        """Return the cleaned value or raise ValidationFailed naming ``label``."""
        if TextValidator.is_blank(text):
            raise ValidationFailed(field, f"{label}을(를) 입력해 주세요.")
        cleaned = TextValidator.sanitize_text(text)
        if not cleaned:
            raise ValidationFailed(field, f"{label}을(를) 입력해 주세요.")
        if max_length is not None and len(cleaned) > max_length:
            raise ValidationFailed(field, f"{label}은(는) {max_length}자 이내로 입력해 주세요.")
        return cleaned


class NumberValidator:

    @staticmethod
    def is_rating(value) -> bool:
        # bool is an int subclass; a checkbox value is not a rating
        return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5

    @staticmethod
    def require_rating(value) -> int:
        if not NumberValidator.is_rating(value):
            raise ValidationFailed("rating", "별점은 1점에서 5점 사이로 선택해 주세요.")
        return value

    @staticmethod
    def as_count(value) -> Optional[int]:
        """Whole number >= 0 from an int or a typed string, else None."""
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            return int(value) if value.isdecimal() else None
        if isinstance(value, int) and value >= 0:
            return value
        return None

    @staticmethod
    def require_monthly_targets(targets: Mapping[Any, Any]) -> Dict[int, int]:
        """Validate {month: target}; every bad month is named in one error."""
        parsed: Dict[int, int] = {}
        invalid = []
        for key, value in targets.items():
            try:
                month = int(key)
            except (TypeError, ValueError):
                invalid.append(str(key))
                continue
            count = NumberValidator.as_count(value)
            if not 1 <= month <= 12 or count is None:
                invalid.append(f"{month}월")
                continue
            parsed[month] = count
        if invalid:
            raise ValidationFailed("monthly", f"{', '.join(invalid)}에 유효하지 않은 목표값이 있습니다.")
        return parsed


class DateValidator:

    @staticmethod
    def parse(field: str, value) -> Optional[date]:
        """Accept a date, an ISO string, or nothing."""
        if value is None or value == "":
            return None
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError as exc:
            raise ValidationFailed(field, f"날짜 형식이 올바르지 않습니다: {value}") from exc
