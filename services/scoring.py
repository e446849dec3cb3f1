"""
Trust scoring for vendor verification records.

Everything here is a pure function of the six category statuses (plus the
suspension flag for the overall status). Services call ``derive_all`` after
every category change and write the result back in full, so the stored
score, status, trust level and badges can never drift apart.

Score = sum of the weights of the *approved* categories:

    phone 15 | email 15 | government_id 25 | facial 20 | business_documents 15 | address 10

Overall status (unless suspended):   >= 90 verified | >= 30 partially_verified | else unverified
Trust level:                         >= 100 premium | >= 75 trusted | >= 40 basic | else new
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from models.vendor_verification import Category, ItemStatus, OverallStatus, TrustLevel

CATEGORY_WEIGHTS: Dict[Category, int] = {
    Category.PHONE: 15,
    Category.EMAIL: 15,
    Category.GOVERNMENT_ID: 25,
    Category.FACIAL: 20,
    Category.BUSINESS_DOCUMENTS: 15,
    Category.ADDRESS: 10,
}

CATEGORY_BADGES: Dict[Category, str] = {
    Category.PHONE: "phone_verified",
    Category.EMAIL: "email_verified",
    Category.GOVERNMENT_ID: "id_verified",
    Category.FACIAL: "facial_verified",
    Category.BUSINESS_DOCUMENTS: "business_verified",
    Category.ADDRESS: "address_verified",
}

# (threshold, value), highest first
STATUS_THRESHOLDS = [
    (90, OverallStatus.VERIFIED),
    (30, OverallStatus.PARTIALLY_VERIFIED),
    (0, OverallStatus.UNVERIFIED),
]

TRUST_THRESHOLDS = [
    (100, TrustLevel.PREMIUM),
    (75, TrustLevel.TRUSTED),
    (40, TrustLevel.BASIC),
    (0, TrustLevel.NEW),
]

TRUSTED_BADGE_SCORE = 90
PREMIUM_BADGE_SCORE = 100


@dataclass
class DerivedFields:
    verification_score: int
    overall_status: OverallStatus
    trust_level: TrustLevel
    badge_display: List[str] = field(default_factory=list)


def calculate_verification_score(statuses: Mapping[Category, ItemStatus]) -> int:
    return sum(
        weight
        for category, weight in CATEGORY_WEIGHTS.items()
        if statuses.get(category) == ItemStatus.APPROVED
    )


def determine_overall_status(score: int, suspended: bool = False) -> OverallStatus:
    if suspended:
        return OverallStatus.SUSPENDED

    for threshold, value in STATUS_THRESHOLDS:
        if score >= threshold:
            return value
    return OverallStatus.UNVERIFIED


def determine_trust_level(score: int) -> TrustLevel:
    for threshold, value in TRUST_THRESHOLDS:
        if score >= threshold:
            return value
    return TrustLevel.NEW


def get_verification_badges(statuses: Mapping[Category, ItemStatus]) -> List[str]:
    badges = [
        CATEGORY_BADGES[category]
        for category in Category
        if statuses.get(category) == ItemStatus.APPROVED
    ]

    score = calculate_verification_score(statuses)
    if score >= TRUSTED_BADGE_SCORE:
        badges.append("trusted_vendor")
    if score >= PREMIUM_BADGE_SCORE:
        badges.append("premium_vendor")

    return badges


def derive_all(statuses: Mapping[Category, ItemStatus], suspended: bool = False) -> DerivedFields:
    """score -> overall status -> trust level -> badges, always from scratch"""
    score = calculate_verification_score(statuses)
    return DerivedFields(
        verification_score=score,
        overall_status=determine_overall_status(score, suspended),
        trust_level=determine_trust_level(score),
        badge_display=get_verification_badges(statuses),
    )
