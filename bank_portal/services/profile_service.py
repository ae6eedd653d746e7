"""Customer profile reads and updates."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.schemas.profile import ProfileUpdateRequest
from bank_portal.security import encrypt_value

logger = structlog.get_logger()

_NOT_NULLABLE = {"first_name", "last_name", "country"}


async def update_profile(
    db: AsyncSession,
    profile: CustomerProfile,
    request: ProfileUpdateRequest,
) -> CustomerProfile:
    """
    Apply the fields present in the request.

    An SSN is normalised to its nine digits, stored encrypted, and its last
    four digits kept for display.
    """
    changes = request.model_dump(exclude_unset=True)
    ssn = changes.pop("ssn", None)

    for field, value in changes.items():
        if value is None and field in _NOT_NULLABLE:
            continue
        setattr(profile, field, value)

    if ssn is not None:
        digits = ssn.replace("-", "")
        profile.ssn_encrypted = encrypt_value(digits)
        profile.ssn_last_four = digits[-4:]

    await db.flush()
    logger.info(
        "profile_updated",
        profile_id=str(profile.id),
        fields=sorted(changes) + (["ssn"] if ssn is not None else []),
    )
    return profile
