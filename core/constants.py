# constants.py

ROLES = {
    "ADMIN": "Administrator - reviews evidence and manages vendor trust",
    "VENDOR": "Vendor - submits verification evidence for their own store",
}

# Badge id -> presentation info
BADGES = {
    "phone_verified": {"label": "Phone Verified", "icon": "phone", "color": "green"},
    "email_verified": {"label": "Email Verified", "icon": "mail", "color": "blue"},
    "id_verified": {"label": "ID Verified", "icon": "id-card", "color": "purple"},
    "facial_verified": {"label": "Identity Confirmed", "icon": "user-check", "color": "teal"},
    "business_verified": {"label": "Business Verified", "icon": "building", "color": "orange"},
    "address_verified": {"label": "Address Verified", "icon": "map-pin", "color": "cyan"},
    "trusted_vendor": {"label": "Trusted Vendor", "icon": "shield-check", "color": "emerald"},
    "premium_vendor": {"label": "Premium Vendor", "icon": "crown", "color": "gold"},
}

SUBMISSION_STATUS_NAMES = {
    "draft": "Draft",
    "submitted": "Submitted",
    "under_review": "Under Review",
    "pending_resubmit": "Resubmit Required",
    "approved": "Approved",
    "rejected": "Rejected",
}

DOCUMENT_TYPE_NAMES = {
    "government_id": "Government ID",
    "passport": "Passport",
    "drivers_license": "Driver's License",
    "voters_id": "Voter's ID",
    "business_registration": "Business Registration",
    "tax_certificate": "Tax Certificate",
    "utility_bill": "Utility Bill",
    "selfie": "Selfie Photo",
}


def get_verification_badge_info(badge: str) -> dict:
    return dict(BADGES.get(badge, {"label": badge, "icon": "check", "color": "gray"}))
