"""Profile lifecycle: save, read and edit with target recomputation."""

import json
import logging
from dataclasses import asdict, dataclass, replace

from pantry_lens.domain.errors import ProfileNotConfigured
from pantry_lens.domain.profile import Gender, Profile, ProfileInputs
from pantry_lens.services.goals import GoalCalculator
from pantry_lens.services.storage import KeyValueStore

PROFILE_KEY = "profile"

_logger = logging.getLogger(__name__)


@dataclass
class ProfileService:
    """Stores the single user profile under one key."""

    store: KeyValueStore
    calculator: GoalCalculator

    def save_profile(self, inputs: ProfileInputs) -> Profile:
        """Validate inputs, compute the target and persist the profile."""
        profile = self.calculator.build_profile(inputs)
        self.store.set(PROFILE_KEY, _encode(profile))
        _logger.info(
            "Profile saved: target=%s kcal", profile.daily_calorie_target
        )
        return profile

    def get_profile(self) -> Profile | None:
        """Return the stored profile, if any."""
        raw = self.store.get(PROFILE_KEY)
        if raw is None:
            return None
        return _decode(raw)

    def require_profile(self) -> Profile:
        """Return the stored profile or raise when onboarding is incomplete."""
        profile = self.get_profile()
        if profile is None:
            raise ProfileNotConfigured("Profile has not been set up")
        return profile

    def update_profile(self, **changes: object) -> Profile:
        """Apply a profile edit; the calorie target is always recomputed."""
        if "daily_calorie_target" in changes:
            raise ValueError("daily_calorie_target is derived and cannot be set")
        current = self.require_profile()
        inputs = replace(current.inputs(), **changes)
        return self.save_profile(inputs)


def _encode(profile: Profile) -> bytes:
    payload = asdict(profile)
    payload["gender"] = Gender(profile.gender).value
    return json.dumps(payload).encode("utf-8")


def _decode(raw: bytes) -> Profile:
    payload = json.loads(raw.decode("utf-8"))
    return Profile(
        gender=Gender(payload["gender"]),
        age_years=payload["age_years"],
        weight_kg=payload["weight_kg"],
        height_cm=payload["height_cm"],
        activity_multiplier=payload["activity_multiplier"],
        goal_offset_kcal=payload["goal_offset_kcal"],
        daily_calorie_target=payload["daily_calorie_target"],
    )
