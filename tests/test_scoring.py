"""
Tests for trust scoring

Verifies:
- Score is the sum of approved category weights only
- Status and trust level thresholds are inclusive
- Badges follow category order, then score badges
- Suspension overrides the status but not score, trust or badges
"""

import pytest

from models.vendor_verification import Category, ItemStatus, OverallStatus, TrustLevel
from services.scoring import (
    CATEGORY_WEIGHTS,
    calculate_verification_score,
    derive_all,
    determine_overall_status,
    determine_trust_level,
    get_verification_badges,
)


def statuses(approved=(), **others):
    result = {category: ItemStatus.NOT_STARTED for category in Category}
    for category in approved:
        result[category] = ItemStatus.APPROVED
    for name, status in others.items():
        result[Category(name)] = status
    return result


class TestScore:
    def test_weights_sum_to_100(self):
        assert sum(CATEGORY_WEIGHTS.values()) == 100

    def test_nothing_approved(self):
        assert calculate_verification_score(statuses()) == 0

    def test_only_approved_counts(self):
        s = statuses(
            approved=[Category.PHONE],
            email=ItemStatus.PENDING,
            government_id=ItemStatus.REJECTED,
            facial=ItemStatus.EXPIRED,
        )
        assert calculate_verification_score(s) == 15

    def test_all_approved(self):
        assert calculate_verification_score(statuses(approved=list(Category))) == 100


class TestThresholds:
    @pytest.mark.parametrize("score,expected", [
        (0, OverallStatus.UNVERIFIED),
        (29, OverallStatus.UNVERIFIED),
        (30, OverallStatus.PARTIALLY_VERIFIED),
        (89, OverallStatus.PARTIALLY_VERIFIED),
        (90, OverallStatus.VERIFIED),
        (99, OverallStatus.VERIFIED),
        (100, OverallStatus.VERIFIED),
    ])
    def test_overall_status(self, score, expected):
        assert determine_overall_status(score) == expected

    @pytest.mark.parametrize("score,expected", [
        (39, TrustLevel.NEW),
        (40, TrustLevel.BASIC),
        (74, TrustLevel.BASIC),
        (75, TrustLevel.TRUSTED),
        (99, TrustLevel.TRUSTED),
        (100, TrustLevel.PREMIUM),
    ])
    def test_trust_level(self, score, expected):
        assert determine_trust_level(score) == expected

    def test_suspended_always_wins(self):
        assert determine_overall_status(100, suspended=True) == OverallStatus.SUSPENDED
        assert determine_overall_status(0, suspended=True) == OverallStatus.SUSPENDED


class TestBadges:
    def test_category_order_not_approval_order(self):
        s = statuses(approved=[Category.ADDRESS, Category.PHONE])
        assert get_verification_badges(s) == ["phone_verified", "address_verified"]

    def test_trusted_badge_at_90(self):
        s = statuses(approved=[
            Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID,
            Category.FACIAL, Category.BUSINESS_DOCUMENTS,
        ])
        badges = get_verification_badges(s)
        assert badges[-1] == "trusted_vendor"
        assert "premium_vendor" not in badges

    def test_premium_badge_at_100(self):
        badges = get_verification_badges(statuses(approved=list(Category)))
        assert badges[-2:] == ["trusted_vendor", "premium_vendor"]
        assert len(badges) == 8


class TestDeriveAll:
    def test_score_75_is_trusted_but_partial(self):
        s = statuses(approved=[Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID, Category.FACIAL])
        derived = derive_all(s)
        assert derived.verification_score == 75
        assert derived.overall_status == OverallStatus.PARTIALLY_VERIFIED
        assert derived.trust_level == TrustLevel.TRUSTED

    def test_suspension_keeps_score_and_badges(self):
        s = statuses(approved=list(Category))
        derived = derive_all(s, suspended=True)
        assert derived.overall_status == OverallStatus.SUSPENDED
        assert derived.verification_score == 100
        assert derived.trust_level == TrustLevel.PREMIUM
        assert "premium_vendor" in derived.badge_display
