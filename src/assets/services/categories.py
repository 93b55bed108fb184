"""Category schemas and validation of asset record fields."""

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date

from ..exceptions import ValidationError

# Standard categories and the attributes each one requires.
DEFAULT_CATEGORIES = {
    "Motor Vehicle": [
        "make",
        "model",
        "year",
        "mileage",
        "registrationNumber",
        "condition",
    ],
    "Land": [
        "sizeInHectares",
        "landTitleType",
        "state",
        "surveyPlanNumber",
        "condition",
        "currentlyInUse",
        "usageDescription",
    ],
    "Building": [
        "buildingType",
        "numberOfFloors",
        "yearBuilt",
        "buildingArea",
        "condition",
        "currentlyInUse",
        "usageDescription",
    ],
    "Office Equipment": [
        "equipmentType",
        "brand",
        "model",
        "serialNumber",
        "condition",
    ],
    "Furniture & Fittings": ["furnitureType", "material", "condition"],
    "Plant/Generator": [
        "generatorType",
        "capacityKW",
        "fuelType",
        "yearManufactured",
        "condition",
    ],
    "Infrastructure": [
        "infrastructureType",
        "lengthOrArea",
        "yearCompleted",
        "condition",
    ],
    "Extractive Assets": [
        "assetType",
        "location",
        "estimatedReserves",
        "quantities",
        "operationalStatus",
    ],
    "Securities/Financial Assets": [
        "assetType",
        "tickerSymbol",
        "units",
        "purchasePrice",
    ],
    "Others": [],
}

# Fields an uploader may supply on upload and change on resubmission.
EDITABLE_FIELDS = (
    "description",
    "location",
    "purchase_date",
    "purchase_cost",
    "market_value",
    "remarks",
    "attributes",
)

MIN_PURCHASE_YEAR = 1900
CENTS = Decimal("0.01")
# Amounts are stored as DecimalField(max_digits=14, decimal_places=2).
MAX_AMOUNT = Decimal(10) ** 12


def category_slug(name: str) -> str:
    """Lowercase slug with runs of non-alphanumerics collapsed to '-'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def field_label(name: str) -> str:
    """Human label for a camelCase attribute name.

    >>> field_label("registrationNumber")
    'Registration Number'
    """
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name)
    return spaced[:1].upper() + spaced[1:]


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_attributes(category, attributes) -> dict:
    """Validate a category attribute map and return the cleaned copy.

    Every required attribute must be present and non-blank. Attribute
    names must be strings. Names the category does not define are
    dropped. Raises ValidationError listing every problem found.
    """
    if attributes is None:
        attributes = {}
    if not isinstance(attributes, dict):
        raise ValidationError(
            fields={"attributes": "Attributes must be an object."}
        )

    errors = {}
    bad_keys = [key for key in attributes if not isinstance(key, str)]
    if bad_keys:
        errors["attributes"] = "Attribute names must be text."

    required = list(category.required_fields or [])
    for name in required:
        if _is_blank(attributes.get(name)):
            errors[f"attributes.{name}"] = (
                f"{field_label(name)} is required for "
                f"{category.name} assets."
            )

    if errors:
        raise ValidationError(fields=errors)

    return {name: attributes[name] for name in required if name in attributes}


def parse_purchase_date(value) -> date:
    """Accept a date, an ISO date string or a {day, month, year} map."""
    if isinstance(value, date):
        return value
    if isinstance(value, dict):
        try:
            return date(
                int(value["year"]), int(value["month"]), int(value["day"])
            )
        except (KeyError, TypeError, ValueError):
            raise ValueError("Enter a valid date.")
    if isinstance(value, str):
        try:
            parsed = parse_date(value.strip())
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValueError("Enter a valid date in YYYY-MM-DD format.")
        return parsed
    raise ValueError("Enter a valid date.")


def _parse_amount(value) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("Enter a valid amount.")
    try:
        amount = Decimal(str(value).replace(",", "").strip())
        if not amount.is_finite():
            raise ValueError("Enter a valid amount.")
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValueError("Enter a valid amount.")
    if amount >= MAX_AMOUNT:
        raise ValueError("Amount must be less than 1,000,000,000,000.")
    return amount


def clean_record_fields(data: dict, partial: bool = False) -> dict:
    """Validate the descriptive fields of an asset record.

    With ``partial`` set, only the fields present in ``data`` are checked
    (resubmission edits); otherwise required fields must all be present.
    Returns the cleaned values. The attribute map is checked separately
    because it depends on the category.
    """
    errors = {}
    cleaned = {}

    for name in ("description", "location"):
        if name not in data and partial:
            continue
        value = data.get(name)
        if _is_blank(value):
            errors[name] = "This field is required."
        else:
            cleaned[name] = str(value).strip()

    if "remarks" in data:
        cleaned["remarks"] = str(data.get("remarks") or "").strip()

    if "purchase_date" in data or not partial:
        value = data.get("purchase_date")
        if _is_blank(value):
            errors["purchase_date"] = "This field is required."
        else:
            try:
                purchase_date = parse_purchase_date(value)
            except ValueError as exc:
                errors["purchase_date"] = str(exc)
            else:
                if purchase_date.year < MIN_PURCHASE_YEAR:
                    errors["purchase_date"] = (
                        f"Year must be {MIN_PURCHASE_YEAR} or later."
                    )
                elif purchase_date > timezone.localdate():
                    errors["purchase_date"] = (
                        "Purchase date cannot be in the future."
                    )
                else:
                    cleaned["purchase_date"] = purchase_date

    if "purchase_cost" in data or not partial:
        value = data.get("purchase_cost")
        if _is_blank(value):
            errors["purchase_cost"] = "This field is required."
        else:
            try:
                cost = _parse_amount(value)
            except ValueError as exc:
                errors["purchase_cost"] = str(exc)
            else:
                if cost <= 0:
                    errors["purchase_cost"] = (
                        "Purchase cost must be greater than zero."
                    )
                else:
                    cleaned["purchase_cost"] = cost

    if "market_value" in data:
        value = data.get("market_value")
        if _is_blank(value):
            cleaned["market_value"] = None
        else:
            try:
                market_value = _parse_amount(value)
            except ValueError as exc:
                errors["market_value"] = str(exc)
            else:
                if market_value <= 0:
                    errors["market_value"] = (
                        "Market value must be greater than zero."
                    )
                else:
                    cleaned["market_value"] = market_value

    if errors:
        raise ValidationError(fields=errors)
    return cleaned


def clean_record_changes(record, changes) -> dict:
    """Validate resubmission edits against the record's category.

    Only EDITABLE_FIELDS may change. Returns field values ready to be
    written alongside the status change.
    """
    if changes is None:
        return {}
    if not isinstance(changes, dict):
        raise ValidationError(
            fields={"changes": "Changes must be an object."}
        )

    unknown = sorted(
        str(name) for name in changes if name not in EDITABLE_FIELDS
    )
    if unknown:
        raise ValidationError(
            fields={
                name: "This field cannot be changed on resubmission."
                for name in unknown
            }
        )

    cleaned = clean_record_fields(changes, partial=True)
    if "attributes" in changes:
        cleaned["attributes"] = validate_attributes(
            record.category, changes["attributes"]
        )
    return cleaned
