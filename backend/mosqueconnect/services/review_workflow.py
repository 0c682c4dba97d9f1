"""
Status-Review Workflow

Moves submitted records through their review state machines:

    mosque / volunteer:      pending -> approved | rejected
    business verification:   pending -> verified | rejected   ("approved" is an alias of "verified")
    halal certification:     pending -> under_review -> approved | rejected
    volunteer application:   pending -> reviewed | accepted | rejected | withdrawn
                             reviewed -> accepted | rejected | withdrawn

Every transition stamps the reviewer and a timestamp, writes an activity log
entry, and applies its side effects on related records (business halal flag,
user volunteer status) in the same commit.
"""
from datetime import datetime, timedelta
from typing import Dict, Set, Optional, Type, Any
import enum

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.core.config import settings
from mosqueconnect.core.exceptions import ValidationError, InvalidStatusTransitionError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import (
    User,
    VolunteerStatus,
    Mosque,
    MosqueStatus,
    Business,
    VerificationStatus,
    Volunteer,
    VolunteerRegistrationStatus,
    HalalCertification,
    CertificationStatus,
    VolunteerApplication,
    ApplicationStatus,
)
from mosqueconnect.services.activity_logger import log_admin_action


Transitions = Dict[Any, Set[Any]]

MOSQUE_TRANSITIONS: Transitions = {
    MosqueStatus.PENDING: {MosqueStatus.APPROVED, MosqueStatus.REJECTED},
}

BUSINESS_TRANSITIONS: Transitions = {
    VerificationStatus.PENDING: {VerificationStatus.VERIFIED, VerificationStatus.REJECTED},
}

VOLUNTEER_TRANSITIONS: Transitions = {
    VolunteerRegistrationStatus.PENDING: {
        VolunteerRegistrationStatus.APPROVED,
        VolunteerRegistrationStatus.REJECTED,
    },
}

CERTIFICATION_TRANSITIONS: Transitions = {
    CertificationStatus.PENDING: {CertificationStatus.UNDER_REVIEW},
    CertificationStatus.UNDER_REVIEW: {CertificationStatus.APPROVED, CertificationStatus.REJECTED},
}

APPLICATION_TRANSITIONS: Transitions = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.REVIEWED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
    ApplicationStatus.REVIEWED: {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    },
}

BUSINESS_STATUS_ALIASES = {"approved": "verified"}

_ACTION_VERBS = {
    "approved": "APPROVE",
    "verified": "APPROVE",
    "accepted": "ACCEPT",
    "rejected": "REJECT",
    "under_review": "START_REVIEW",
    "reviewed": "MARK_REVIEWED",
    "withdrawn": "WITHDRAW",
}


def parse_status(
    enum_cls: Type[enum.Enum],
    value: Any,
    entity_type: str,
    aliases: Optional[Dict[str, str]] = None,
) -> enum.Enum:
    """Convert a requested status string into the entity's enum (400 when unknown)"""
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip().lower()
    raw = (aliases or {}).get(raw, raw)
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {entity_type} status '{value}'. Must be one of: {allowed}", field="status")


def allowed_targets(transitions: Transitions, current) -> Set:
    return transitions.get(current, set())


def check_transition(entity_type: str, transitions: Transitions, current, target) -> None:
    allowed = allowed_targets(transitions, current)
    if target not in allowed:
        raise InvalidStatusTransitionError(
            entity_type,
            getattr(current, "value", str(current)),
            getattr(target, "value", str(target)),
            [a.value for a in allowed],
        )


def _action_name(target: enum.Enum, entity_label: str) -> str:
    return f"{_ACTION_VERBS.get(target.value, target.value.upper())}_{entity_label}"


async def _finish(
    db: AsyncSession,
    entity_type: str,
    entity_id: str,
    previous: enum.Enum,
    target: enum.Enum,
    reviewer: User,
    module: str,
    details: str,
    request: Optional[Request],
) -> None:
    log_admin_action(
        db,
        admin_id=reviewer.id,
        action=_action_name(target, entity_type.upper().replace(" ", "_")),
        module=module,
        target_id=entity_id,
        details=details,
        changes={"status": {"from": previous.value, "to": target.value}},
        request=request,
    )
    await db.commit()
    logger.log_review_event(entity_type, str(entity_id), previous.value, target.value, str(reviewer.id))


# ==================== Mosques ====================

async def review_mosque(
    db: AsyncSession,
    mosque: Mosque,
    target_status: Any,
    reviewer: User,
    notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> Mosque:
    target = parse_status(MosqueStatus, target_status, "mosque")
    previous = mosque.status
    check_transition("mosque", MOSQUE_TRANSITIONS, previous, target)

    mosque.status = target
    mosque.verified = target == MosqueStatus.APPROVED
    mosque.verification_notes = notes
    mosque.verified_by = reviewer.id
    mosque.verified_at = datetime.utcnow()

    await _finish(db, "mosque", mosque.id, previous, target, reviewer, "mosques",
                  f"{target.value.capitalize()} mosque {mosque.name}", request)
    return mosque


# ==================== Businesses ====================

async def review_business(
    db: AsyncSession,
    business: Business,
    target_status: Any,
    reviewer: User,
    notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> Business:
    target = parse_status(VerificationStatus, target_status, "business", aliases=BUSINESS_STATUS_ALIASES)
    previous = business.verification_status
    check_transition("business", BUSINESS_TRANSITIONS, previous, target)

    business.verification_status = target
    business.verification_notes = notes
    business.verified_by = reviewer.id
    business.verified_at = datetime.utcnow()

    await _finish(db, "business", business.id, previous, target, reviewer, "businesses",
                  f"{target.value.capitalize()} business {business.name}", request)
    return business


# ==================== Volunteers ====================

async def review_volunteer(
    db: AsyncSession,
    volunteer: Volunteer,
    target_status: Any,
    reviewer: User,
    notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> Volunteer:
    target = parse_status(VolunteerRegistrationStatus, target_status, "volunteer")
    previous = volunteer.status
    check_transition("volunteer", VOLUNTEER_TRANSITIONS, previous, target)

    now = datetime.utcnow()
    volunteer.status = target
    volunteer.notes = notes
    volunteer.reviewed_by = reviewer.id
    volunteer.reviewed_at = now

    user = await db.get(User, volunteer.user_id)
    if user is not None:
        if target == VolunteerRegistrationStatus.APPROVED:
            user.volunteer_status = VolunteerStatus.ACTIVE
            user.volunteer_active_since = now
        else:
            user.volunteer_status = VolunteerStatus.INACTIVE

    await _finish(db, "volunteer", volunteer.id, previous, target, reviewer, "volunteers",
                  f"{target.value.capitalize()} volunteer {volunteer.name}", request)
    return volunteer


# ==================== Halal certifications ====================

async def review_certification(
    db: AsyncSession,
    certification: HalalCertification,
    target_status: Any,
    reviewer: User,
    notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> HalalCertification:
    target = parse_status(CertificationStatus, target_status, "certification")
    previous = certification.status
    check_transition("certification", CERTIFICATION_TRANSITIONS, previous, target)

    now = datetime.utcnow()
    certification.status = target
    certification.review_notes = notes
    certification.reviewer_id = reviewer.id
    certification.reviewed_at = now

    if target == CertificationStatus.APPROVED:
        certification.expiry_date = now + timedelta(days=settings.CERTIFICATION_VALIDITY_DAYS)
        certification.certificate_url = f"{settings.CERTIFICATE_URL_BASE}/{certification.id}.pdf"
        if not certification.certificate_number:
            certification.certificate_number = f"HC-{now:%Y}-{str(certification.id)[:8].upper()}"

        business = await db.get(Business, certification.business_id)
        if business is not None:
            business.is_halal_certified = True
            business.halal_certified_until = certification.expiry_date

    await _finish(db, "halal certification", certification.id, previous, target, reviewer,
                  "halal_certifications",
                  f"{target.value.replace('_', ' ').capitalize()} halal certification for {certification.business_name}",
                  request)
    return certification


# ==================== Volunteer applications ====================

async def respond_to_application(
    db: AsyncSession,
    application: VolunteerApplication,
    target_status: Any,
    responder: User,
    message: Optional[str] = None,
    notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> VolunteerApplication:
    """Mosque-side review of an application (imam of the mosque or admin)"""
    target = parse_status(ApplicationStatus, target_status, "application")
    if target == ApplicationStatus.WITHDRAWN:
        raise ValidationError("Only the applicant can withdraw an application", field="status")
    previous = application.status
    check_transition("application", APPLICATION_TRANSITIONS, previous, target)

    now = datetime.utcnow()
    application.status = target
    application.responded_by = responder.id
    application.responded_at = now
    application.response_message = message
    application.response_notes = notes

    if target == ApplicationStatus.ACCEPTED:
        user = await db.get(User, application.user_id)
        if user is not None and user.volunteer_status != VolunteerStatus.ACTIVE:
            user.volunteer_status = VolunteerStatus.ACTIVE
            user.volunteer_active_since = now

    await _finish(db, "application", application.id, previous, target, responder,
                  "volunteer_applications", f"{target.value.capitalize()} application {application.title}",
                  request)
    return application


async def withdraw_application(db: AsyncSession, application: VolunteerApplication) -> VolunteerApplication:
    previous = application.status
    check_transition("application", APPLICATION_TRANSITIONS, previous, ApplicationStatus.WITHDRAWN)
    application.status = ApplicationStatus.WITHDRAWN
    await db.commit()
    logger.info(f"Application {application.id} withdrawn by applicant (was {previous.value})")
    return application
