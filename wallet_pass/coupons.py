"""
Coupon value object, request validation and the demo coupon catalog.
"""
from dataclasses import dataclass
from datetime import datetime, timezone

from wallet_pass.errors import ValidationError

REQUIRED_FIELDS = ("title", "code", "validUntil")

# Accepted besides ISO-8601, e.g. "December 31, 2024" / "Dec 31, 2024"
_HUMAN_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y")


@dataclass(frozen=True)
class CouponData:
    id: str
    title: str
    code: str
    discount: str
    valid_until: str
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "CouponData":
        """Build from a JSON body (camelCase validUntil). Values are coerced to str; None stays empty."""

        def _text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            id=_text("id"),
            title=_text("title"),
            code=_text("code"),
            discount=_text("discount"),
            valid_until=_text("validUntil"),
            description=_text("description") or None,
        )

    def to_dict(self) -> dict:
        body = {
            "id": self.id,
            "title": self.title,
            "code": self.code,
            "discount": self.discount,
            "validUntil": self.valid_until,
        }
        if self.description:
            body["description"] = self.description
        return body


def parse_valid_until(value: str) -> datetime:
    """
    Parse an expiry date as UTC. Naive values are taken as UTC.
    Raises ValidationError when the value is not a recognised date.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in _HUMAN_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        raise ValidationError(f"Invalid validUntil date: {value}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        raise ValidationError(f"Invalid validUntil date: {value}")


def validate_coupon(data) -> CouponData:
    """Check the request body before any network activity."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    if not all(data.get(f) for f in REQUIRED_FIELDS):
        raise ValidationError("Missing required coupon fields: title, code, validUntil")
    coupon = CouponData.from_dict(data)
    parse_valid_until(coupon.valid_until)
    return coupon


SAMPLE_COUPONS = (
    CouponData(
        id="save20",
        title="20% Off Your Next Purchase",
        code="SAVE20NOW",
        discount="20%",
        valid_until="December 31, 2024",
        description="Get 20% off on any purchase over $50",
    ),
    CouponData(
        id="freecoffee",
        title="Free Coffee",
        code="FREECOFFEE",
        discount="100%",
        valid_until="January 15, 2025",
        description="Complimentary coffee with any pastry purchase",
    ),
    CouponData(
        id="lunchdeal",
        title="Lunch Special",
        code="LUNCH50",
        discount="50%",
        valid_until="February 28, 2025",
        description="50% off lunch items Monday-Friday",
    ),
)
