"""
Google Wallet GenericClass / GenericObject payloads. Pure functions; no network.
"""
import time
from datetime import datetime, timezone

from wallet_pass.config import (
    CLASS_CARD_TITLE,
    HERO_IMAGE_URI,
    ISSUER_NAME,
    LANGUAGE,
    LOGO_URI,
    PROGRAM_NAME,
    WEBSITE_URI,
)
from wallet_pass.coupons import CouponData, parse_valid_until


def _localized(value: str) -> dict:
    return {"defaultValue": {"language": LANGUAGE, "value": value}}


def _iso_utc(dt: datetime) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-12-31T00:00:00.000Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_object_id(issuer_id: str, now_ms: int | None = None) -> str:
    """Object ids are "<issuer>.coupon<unix millis>"."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{issuer_id}.coupon{now_ms}"


def build_class_payload(class_id: str) -> dict:
    return {
        "id": class_id,
        "issuerName": ISSUER_NAME,
        "programName": PROGRAM_NAME,
        "reviewStatus": "underReview",
        "cardTitle": _localized(CLASS_CARD_TITLE),
        "logo": {"sourceUri": {"uri": LOGO_URI}},
    }


def build_object_payload(class_id: str, coupon: CouponData, issuer_id: str, now: datetime | None = None) -> dict:
    """
    Project a coupon onto a GenericObject. Falsy fields fall back to "Coupon" / "Discount" / "".
    A description text module is only added when the coupon has one.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    title = coupon.title or "Coupon"

    text_modules = [
        {"header": "Coupon Code", "body": coupon.code or "", "id": "coupon_code"},
        {"header": "Discount", "body": coupon.discount or "", "id": "discount"},
        {"header": "Valid Until", "body": coupon.valid_until or "", "id": "valid_until"},
    ]
    if coupon.description:
        text_modules.append({"header": "Description", "body": coupon.description, "id": "description"})

    messages = []
    if coupon.title:
        messages.append(
            {
                "header": coupon.title,
                "body": coupon.description or "",
                "actionUri": {"uri": WEBSITE_URI},
            }
        )

    valid_time = {"start": {"date": _iso_utc(now)}}
    if coupon.valid_until:
        valid_time["end"] = {"date": _iso_utc(parse_valid_until(coupon.valid_until))}

    return {
        "id": generate_object_id(issuer_id, int(now.timestamp() * 1000)),
        "classId": class_id,
        # lowercase per Wallet API
        "state": "active",
        "cardTitle": _localized(title),
        "header": _localized(title),
        "subheader": _localized(coupon.discount or "Discount"),
        "logo": {"sourceUri": {"uri": LOGO_URI}},
        "heroImage": {"sourceUri": {"uri": HERO_IMAGE_URI}},
        "barcode": {
            "type": "qrCode",
            "value": coupon.code or "",
            "alternateText": coupon.code or "",
        },
        "validTimeInterval": valid_time,
        "textModulesData": text_modules,
        "linksModuleData": {
            "uris": [{"uri": WEBSITE_URI, "description": ISSUER_NAME, "id": "website"}],
        },
        "messages": messages,
    }
