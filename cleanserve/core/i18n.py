"""Bilingual (English/Arabic) text helpers.

Every API response carries a ``message``/``message_ar`` pair looked up from
``MESSAGES``. Catalog names (services, packages, spare parts) are stored as
``{"en": ..., "ar": ...}`` JSON and read through :class:`LocalizedText`.
"""
from dataclasses import dataclass

SUPPORTED_LANGUAGES = ("en", "ar")

MESSAGES: dict[str, dict[str, str]] = {
    "auth.unauthorized": {"en": "Unauthorized access", "ar": "وصول غير مصرح به"},
    "auth.access_denied": {"en": "Access denied", "ar": "تم رفض الوصول"},
    "auth.insufficient_permissions": {"en": "Insufficient permissions", "ar": "صلاحيات غير كافية"},
    "auth.profile_retrieved": {"en": "Profile retrieved successfully", "ar": "تم استرداد الملف الشخصي بنجاح"},

    "addresses.not_found": {"en": "Address not found", "ar": "العنوان غير موجود"},
    "services.category_not_found": {"en": "Service not found", "ar": "الخدمة غير موجودة"},
    "services.package_not_found": {"en": "Service package not found", "ar": "باقة الخدمة غير موجودة"},
    "spare_parts.not_found": {"en": "Spare part not found", "ar": "قطعة الغيار غير موجودة"},

    "referral.invalid_code": {"en": "Invalid referral code", "ar": "رمز الإحالة غير صحيح"},
    "referral.cannot_use_own_code": {"en": "You cannot use your own referral code", "ar": "لا يمكنك استخدام رمز الإحالة الخاص بك"},
    "referral.no_active_campaign": {"en": "No active referral campaign available", "ar": "لا توجد حملة إحالة نشطة حالياً"},
    "referral.usage_limit_reached": {"en": "This referral code has reached its usage limit", "ar": "وصل رمز الإحالة هذا إلى الحد الأقصى للاستخدام"},

    "booking.created_successfully": {"en": "Booking created successfully", "ar": "تم إنشاء الحجز بنجاح"},
    "booking.retrieved_successfully": {"en": "Booking retrieved successfully", "ar": "تم استرداد الحجز بنجاح"},
    "booking.not_found": {"en": "Booking not found", "ar": "الحجز غير موجود"},
    "booking.not_assigned": {"en": "Booking not assigned to you", "ar": "الحجز غير مخصص لك"},
    "booking.cannot_accept": {"en": "Cannot accept this booking", "ar": "لا يمكن قبول هذا الحجز"},

    "quotation.created_successfully": {"en": "Quotation created successfully", "ar": "تم إنشاء عرض السعر بنجاح"},
    "quotation.not_found": {"en": "Quotation not found", "ar": "عرض السعر غير موجود"},
    "quotation.approved_successfully": {"en": "Quotation approved successfully", "ar": "تمت الموافقة على عرض السعر بنجاح"},
    "quotation.rejected_successfully": {"en": "Quotation rejected successfully", "ar": "تم رفض عرض السعر بنجاح"},
    "quotation.already_processed": {"en": "Quotation has already been processed", "ar": "تمت معالجة عرض السعر بالفعل"},
    "quotation.already_pending": {"en": "This booking already has a pending quotation", "ar": "يوجد عرض سعر قيد الانتظار لهذا الحجز"},

    "orders.retrieved_successfully": {"en": "Orders retrieved successfully", "ar": "تم استرداد الطلبات بنجاح"},
    "orders.status_retrieved": {"en": "Order status retrieved successfully", "ar": "تم استرداد حالة الطلب بنجاح"},
    "orders.technician_orders_retrieved": {"en": "Technician orders retrieved successfully", "ar": "تم استرداد طلبات الفني بنجاح"},
    "orders.accepted_successfully": {"en": "Order accepted successfully", "ar": "تم قبول الطلب بنجاح"},
    "orders.status_updated": {"en": "Order status updated successfully", "ar": "تم تحديث حالة الطلب بنجاح"},
    "orders.invalid_transition": {"en": "Order cannot move to this status from its current status", "ar": "لا يمكن نقل الطلب إلى هذه الحالة من حالته الحالية"},

    "validation.invalid_data": {"en": "Invalid data provided", "ar": "البيانات المقدمة غير صحيحة"},
    "validation.invalid_status": {"en": "Invalid status provided", "ar": "الحالة المقدمة غير صحيحة"},
    "validation.invalid_discount": {"en": "Discount percentage must be between 0 and 100", "ar": "يجب أن تكون نسبة الخصم بين 0 و 100"},

    "general.not_found": {"en": "Resource not found", "ar": "المورد غير موجود"},
    "general.server_error": {"en": "Internal server error. Please try again later", "ar": "خطأ في الخادم الداخلي. يرجى المحاولة لاحقاً"},
}

STATUS_NAMES: dict[str, dict[str, str]] = {
    "pending": {"en": "Pending", "ar": "في الانتظار"},
    "confirmed": {"en": "Confirmed", "ar": "مؤكد"},
    "technician_assigned": {"en": "Technician assigned", "ar": "تم تعيين فني"},
    "en_route": {"en": "En route", "ar": "في الطريق"},
    "in_progress": {"en": "In progress", "ar": "جاري التنفيذ"},
    "quotation_pending": {"en": "Awaiting quotation approval", "ar": "في انتظار الموافقة على السعر"},
    "completed": {"en": "Completed", "ar": "مكتمل"},
    "cancelled": {"en": "Cancelled", "ar": "ملغي"},
}


@dataclass(frozen=True)
class LocalizedText:
    en: str
    ar: str = ""

    @classmethod
    def from_json(cls, value) -> "LocalizedText":
        if isinstance(value, LocalizedText):
            return value
        if isinstance(value, dict):
            return cls(en=str(value.get("en") or ""), ar=str(value.get("ar") or ""))
        return cls(en=str(value or ""))

    def to_json(self) -> dict:
        return {"en": self.en, "ar": self.ar}


def resolve(text, lang: str) -> str:
    """Pick the ``lang`` variant of ``text``, falling back to English."""
    t = LocalizedText.from_json(text)
    if lang == "ar" and t.ar:
        return t.ar
    return t.en


def normalize_language(value: str | None, fallback: str = "en") -> str:
    """Reduce an Accept-Language style value (``ar-SA,ar;q=0.9``) to ``en``/``ar``."""
    if value:
        primary = value.split(",")[0].split(";")[0].strip().lower()
        code = primary.split("-")[0]
        if code in SUPPORTED_LANGUAGES:
            return code
    return fallback if fallback in SUPPORTED_LANGUAGES else "en"


def message_pair(key: str, **variables) -> dict[str, str]:
    entry = MESSAGES.get(key) or {"en": key, "ar": key}
    en, ar = entry["en"], entry.get("ar") or entry["en"]
    if variables:
        en, ar = en.format(**variables), ar.format(**variables)
    return {"message": en, "message_ar": ar}


def status_name(status: str, lang: str) -> str:
    return resolve(STATUS_NAMES.get(status, {"en": status}), lang)
