"""Donation validation, creation and editing.

Field formats are checked by the pydantic schemas. The rules here depend on
``donation_type``: exactly one detail group (money or goods) may be
populated, and ``net_amount`` always follows ``gross_amount`` through
``calculate_net_amount``. All offending fields are reported together.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError

from donation_hub.core.config import settings
from donation_hub.core.exceptions import FieldValidationError, UpstreamError
from donation_hub.models.donation import Donation
from donation_hub.repositories.donations import DonationRepository
from donation_hub.schemas.donation import (
    GOODS_FIELDS,
    MONEY_FIELDS,
    DonationCreate,
    DonationResponse,
    DonationUpdate,
)
from donation_hub.services import storage
from donation_hub.services.lifecycle import INITIAL_STATUS, normalize_status
from donation_hub.services.net_amount import calculate_net_amount

logger = logging.getLogger(__name__)

REQUIRED_BY_TYPE = {
    "money": ("gross_amount",),
    "goods": ("item_list", "pickup_address"),
}
FORBIDDEN_BY_TYPE = {
    "money": GOODS_FIELDS,
    "goods": MONEY_FIELDS,
}


def _add(errors: dict[str, list[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _merge(errors: dict[str, list[str]], exc: FieldValidationError) -> None:
    for field, messages in exc.errors.items():
        errors.setdefault(field, []).extend(messages)


def new_donation_errors(data: DonationCreate) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    values = data.model_dump()
    kind = data.donation_type

    for field in REQUIRED_BY_TYPE[kind]:
        if values.get(field) in (None, ""):
            _add(errors, field, f"Required for {kind} donations")
    for field in FORBIDDEN_BY_TYPE[kind]:
        if values.get(field) is not None:
            _add(errors, field, f"Not allowed for {kind} donations")
    return errors


def check_new_donation(data: DonationCreate) -> None:
    errors = new_donation_errors(data)
    if errors:
        raise FieldValidationError(errors)


def check_donation_patch(donation: Donation, patch: DonationUpdate) -> None:
    """Validate only the fields present in ``patch`` against the stored type."""
    errors: dict[str, list[str]] = {}
    present = patch.model_dump(exclude_unset=True)
    kind = donation.donation_type

    if "donation_type" in present and present["donation_type"] != kind:
        _add(errors, "donation_type", "Donation type cannot be changed")
    for field in REQUIRED_BY_TYPE[kind]:
        if field in present and present[field] in (None, ""):
            _add(errors, field, f"Required for {kind} donations")
    for field in FORBIDDEN_BY_TYPE[kind]:
        if present.get(field) is not None:
            _add(errors, field, f"Not allowed for {kind} donations")
    if "donor_email" in present and present["donor_email"] is None:
        _add(errors, "donor_email", "Email is required")
    if "donor_name" in present and present["donor_name"] is None:
        _add(errors, "donor_name", "Name is required")
    if "is_anonymous" in present and present["is_anonymous"] is None:
        _add(errors, "is_anonymous", "Must be true or false")
    if present.get("status") is not None:
        try:
            normalize_status(present["status"])
        except FieldValidationError as exc:
            _merge(errors, exc)
    elif "status" in present:
        _add(errors, "status", "Status is required")

    if errors:
        raise FieldValidationError(errors)


def build_donation(data: DonationCreate) -> Donation:
    """A new donation is always ``pending``; client-sent status is never read."""
    check_new_donation(data)
    now = datetime.now(UTC)
    return Donation(
        donor_name=data.donor_name or settings.ANONYMOUS_DONOR_LABEL,
        donor_email=data.donor_email,
        donor_phone=data.donor_phone,
        donation_type=data.donation_type,
        gross_amount=data.gross_amount,
        net_amount=calculate_net_amount(data.gross_amount),
        payment_method=data.payment_method,
        transfer_proof_url=data.transfer_proof_url,
        item_list=data.item_list,
        quantity=data.quantity,
        pickup_address=data.pickup_address,
        notes=data.notes,
        is_anonymous=data.is_anonymous,
        status=INITIAL_STATUS,
        created_at=now,
        updated_at=now,
    )


def apply_patch(donation: Donation, patch: DonationUpdate) -> list[str]:
    """Apply a validated patch in place; returns the changed field names."""
    check_donation_patch(donation, patch)
    present = patch.model_dump(exclude_unset=True)
    present.pop("donation_type", None)

    if "status" in present:
        present["status"] = normalize_status(present["status"])

    changed = []
    for field, value in present.items():
        if getattr(donation, field) != value:
            setattr(donation, field, value)
            changed.append(field)

    if "gross_amount" in present:
        donation.net_amount = calculate_net_amount(donation.gross_amount)

    donation.updated_at = datetime.now(UTC)
    return changed


def display_name(donation: Donation) -> str:
    if donation.is_anonymous:
        return settings.ANONYMOUS_DONOR_LABEL
    return donation.donor_name


def to_response(donation: Donation) -> DonationResponse:
    return DonationResponse(
        id=donation.id,
        donor_name=donation.donor_name,
        display_name=display_name(donation),
        donor_email=donation.donor_email,
        donor_phone=donation.donor_phone,
        donation_type=donation.donation_type,
        gross_amount=donation.gross_amount,
        net_amount=donation.net_amount,
        payment_method=donation.payment_method,
        transfer_proof_url=donation.transfer_proof_url,
        item_list=donation.item_list,
        quantity=donation.quantity,
        pickup_address=donation.pickup_address,
        notes=donation.notes,
        is_anonymous=donation.is_anonymous,
        status=donation.status,
        created_at=donation.created_at,
        updated_at=donation.updated_at,
    )


async def create_donation(repo: DonationRepository, data: DonationCreate) -> Donation:
    donation = build_donation(data)
    try:
        await repo.create(donation)
    except SQLAlchemyError as exc:
        logger.error("Saving donation failed", exc_info=exc)
        raise UpstreamError("create_donation", "Donation could not be saved") from exc
    logger.info(
        "Donation %s created (%s, net=%s)",
        donation.id,
        donation.donation_type,
        donation.net_amount,
    )
    return donation


async def submit_with_proof(
    repo: DonationRepository,
    data: DonationCreate,
    proof: bytes,
    content_type: str,
) -> Donation:
    """Upload the transfer proof, then create the donation referencing it.

    Payload and file are validated together before the upload, so a bad
    request never stores a file and reports every failing field at once.
    If the create step fails after a successful upload the file is left
    orphaned; the key is logged so it can be cleaned up by hand.
    """
    errors = new_donation_errors(data)
    if data.donation_type != "money":
        _add(errors, "file", "Transfer proof only applies to money donations")
    else:
        try:
            storage.validate_upload(len(proof), content_type, storage.TRANSFER_PROOF_CONTENT_TYPES)
        except FieldValidationError as exc:
            _merge(errors, exc)
    if errors:
        raise FieldValidationError(errors)

    try:
        url = await storage.upload(proof, content_type, storage.TRANSFER_PROOF_PREFIX)
    except UpstreamError as exc:
        raise UpstreamError("upload_proof", "Transfer proof upload failed") from exc

    data = data.model_copy(update={"transfer_proof_url": url})
    try:
        return await create_donation(repo, data)
    except UpstreamError:
        logger.warning("Donation not created; uploaded proof %s is orphaned", url)
        raise


async def delete_donation(repo: DonationRepository, donation: Donation) -> None:
    """Delete the record, then best-effort delete of its transfer proof."""
    proof = donation.transfer_proof_url
    donation_id = donation.id
    await repo.delete(donation)
    logger.info("Donation %s deleted", donation_id)
    if proof:
        try:
            await storage.delete(proof)
        except UpstreamError:
            logger.warning(
                "Transfer proof %s of deleted donation %s left in storage", proof, donation_id
            )
