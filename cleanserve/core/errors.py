"""Service-layer errors.

Services raise these; ``cleanserve.main`` turns them into bilingual JSON
responses. Each class fixes the HTTP status, the message catalog key and a
stable machine-readable ``code``.
"""


class ServiceError(Exception):
    status_code = 400
    message_key = "validation.invalid_data"
    code = "bad_request"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.code)
        self.detail = detail or self.code


# -------------------------
# NotFound (404)
# -------------------------
class NotFound(ServiceError):
    status_code = 404
    message_key = "general.not_found"
    code = "not_found"

class ServiceNotFound(NotFound):
    message_key = "services.category_not_found"
    code = "service_not_found"

class PackageNotFound(NotFound):
    message_key = "services.package_not_found"
    code = "package_not_found"

class AddressNotFound(NotFound):
    message_key = "addresses.not_found"
    code = "address_not_found"

class BookingNotFound(NotFound):
    message_key = "booking.not_found"
    code = "booking_not_found"

class QuotationNotFound(NotFound):
    message_key = "quotation.not_found"
    code = "quotation_not_found"

class SparePartNotFound(NotFound):
    message_key = "spare_parts.not_found"
    code = "spare_part_not_found"


# -------------------------
# Forbidden (403)
# -------------------------
class Forbidden(ServiceError):
    status_code = 403
    message_key = "auth.access_denied"
    code = "forbidden"

class NotAssigned(Forbidden):
    message_key = "booking.not_assigned"
    code = "not_assigned"


# -------------------------
# BusinessRuleViolation (400)
# -------------------------
class BusinessRuleViolation(ServiceError):
    status_code = 400

class InvalidReferralCode(BusinessRuleViolation):
    message_key = "referral.invalid_code"
    code = "invalid_referral_code"

class SelfReferralNotAllowed(BusinessRuleViolation):
    message_key = "referral.cannot_use_own_code"
    code = "self_referral_not_allowed"

class NoActiveCampaign(BusinessRuleViolation):
    message_key = "referral.no_active_campaign"
    code = "no_active_campaign"

class UsageLimitReached(BusinessRuleViolation):
    message_key = "referral.usage_limit_reached"
    code = "usage_limit_reached"

class QuotationAlreadyProcessed(BusinessRuleViolation):
    message_key = "quotation.already_processed"
    code = "quotation_already_processed"

class QuotationAlreadyPending(BusinessRuleViolation):
    message_key = "quotation.already_pending"
    code = "quotation_already_pending"

class InvalidStatus(BusinessRuleViolation):
    message_key = "validation.invalid_status"
    code = "invalid_status"

class InvalidTransition(BusinessRuleViolation):
    message_key = "orders.invalid_transition"
    code = "invalid_transition"

class BookingNotAcceptable(BusinessRuleViolation):
    message_key = "booking.cannot_accept"
    code = "booking_not_acceptable"

class InvalidDiscount(BusinessRuleViolation, ValueError):
    message_key = "validation.invalid_discount"
    code = "invalid_discount"
