import pytest

from cleanserve.core.i18n import LocalizedText, message_pair, normalize_language, resolve, status_name


@pytest.mark.parametrize("header,expected", [
    ("ar", "ar"),
    ("ar-SA,ar;q=0.9,en;q=0.8", "ar"),
    ("EN-us", "en"),
    ("fr-FR", "en"),
    (None, "en"),
    ("", "en"),
])
def test_normalize_language(header, expected):
    assert normalize_language(header) == expected


def test_normalize_language_uses_fallback():
    assert normalize_language("de", fallback="ar") == "ar"
    assert normalize_language(None, fallback="xx") == "en"


def test_resolve_falls_back_to_english():
    assert resolve({"en": "Deep Cleaning", "ar": "تنظيف عميق"}, "ar") == "تنظيف عميق"
    assert resolve({"en": "Deep Cleaning", "ar": ""}, "ar") == "Deep Cleaning"
    assert resolve("Plain", "ar") == "Plain"
    assert LocalizedText.from_json({"en": "A"}).to_json() == {"en": "A", "ar": ""}


def test_message_pair_and_status_names():
    assert message_pair("booking.not_found") == {"message": "Booking not found", "message_ar": "الحجز غير موجود"}
    assert message_pair("no.such.key")["message"] == "no.such.key"
    assert status_name("cancelled", "ar") == "ملغي"
    assert status_name("unknown", "ar") == "unknown"
