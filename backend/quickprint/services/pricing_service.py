# Overview: Print recipe value type and the per-job price formula.

"""
Pricing for one print job.

    page_count    = all pages, or the pages selected by the recipe
    printing_cost = round(rate(color_mode) * page_count * copies * sides_multiplier)
    price         = printing_cost + PLATFORM_FEE_CENTS

All amounts are integer cents (paise for the reference shop). Rounding is
ROUND_HALF_UP on a Decimal product: 13.5 -> 14. Every input is
non-negative, so this is also round-half-away-from-zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping

from ..models import ColorMode, Sides
from ..validation import ValidationError
from .page_range_service import ALL_PAGES, count_pages


BLACK_AND_WHITE_RATE_CENTS = 150
COLOR_RATE_CENTS = 1000
SINGLE_SIDED_MULTIPLIER = Decimal("1")
# Below 1 is a discount for duplex, above 1 a surcharge
DOUBLE_SIDED_MULTIPLIER = Decimal("0.9")
PLATFORM_FEE_CENTS = 100

MIN_COPIES = 1
MAX_COPIES = 100


@dataclass(frozen=True)
class PriceTable:
    bw_rate_cents: int = BLACK_AND_WHITE_RATE_CENTS
    color_rate_cents: int = COLOR_RATE_CENTS
    double_sided_multiplier: Decimal = DOUBLE_SIDED_MULTIPLIER
    platform_fee_cents: int = PLATFORM_FEE_CENTS

    def rate_for(self, color_mode: ColorMode) -> int:
        if color_mode == ColorMode.COLOR:
            return self.color_rate_cents
        return self.bw_rate_cents

    def sides_multiplier(self, sides: Sides) -> Decimal:
        if sides == Sides.DOUBLE:
            return self.double_sided_multiplier
        return SINGLE_SIDED_MULTIPLIER


DEFAULT_PRICE_TABLE = PriceTable()


def price_table_from_config(config: Mapping[str, Any]) -> PriceTable:
    """Build a PriceTable from Flask config; unset keys keep the defaults."""
    def _get(key, cast, default):
        raw = config.get(key)
        if raw is None or raw == "":
            return default
        return cast(raw)

    return PriceTable(
        bw_rate_cents=_get("BW_RATE_CENTS", int, BLACK_AND_WHITE_RATE_CENTS),
        color_rate_cents=_get("COLOR_RATE_CENTS", int, COLOR_RATE_CENTS),
        double_sided_multiplier=_get("DOUBLE_SIDED_MULTIPLIER", lambda v: Decimal(str(v)), DOUBLE_SIDED_MULTIPLIER),
        platform_fee_cents=_get("PLATFORM_FEE_CENTS", int, PLATFORM_FEE_CENTS),
    )


@dataclass(frozen=True)
class PrintRecipe:
    """The customer's print configuration for one job. Immutable once submitted."""

    pages: str = ALL_PAGES
    color_mode: ColorMode = ColorMode.BLACK_AND_WHITE
    sides: Sides = Sides.SINGLE
    copies: int = 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PrintRecipe":
        """
        Build a recipe from request JSON.

        Raises ValidationError for unknown color modes / sides or a
        non-integer copies value. Range checks happen in validate_recipe.
        """
        pages = data.get("pages", ALL_PAGES)
        if not isinstance(pages, str):
            raise ValidationError("pages must be 'all' or a page range", field="pages")
        pages = pages.strip()

        try:
            color_mode = ColorMode(data.get("color_mode", ColorMode.BLACK_AND_WHITE.value))
        except ValueError:
            raise ValidationError("color_mode must be 'bw' or 'color'", field="color_mode")

        try:
            sides = Sides(data.get("sides", Sides.SINGLE.value))
        except ValueError:
            raise ValidationError("sides must be 'single' or 'double'", field="sides")

        copies = data.get("copies", 1)
        if isinstance(copies, str) and copies.strip().lstrip("-").isdigit():
            copies = int(copies.strip())
        if isinstance(copies, bool) or not isinstance(copies, int):
            raise ValidationError("copies must be an integer", field="copies")

        return cls(pages=pages, color_mode=color_mode, sides=sides, copies=copies)

    def to_dict(self) -> dict:
        return {
            "pages": self.pages,
            "color_mode": self.color_mode.value,
            "sides": self.sides.value,
            "copies": self.copies,
        }


@dataclass(frozen=True)
class PriceBreakdown:
    page_count: int
    printing_cost_cents: int
    platform_fee_cents: int

    @property
    def total_cents(self) -> int:
        return self.printing_cost_cents + self.platform_fee_cents

    def to_dict(self) -> dict:
        return {
            "page_count": self.page_count,
            "printing_cost_cents": self.printing_cost_cents,
            "platform_fee_cents": self.platform_fee_cents,
            "total_cents": self.total_cents,
        }


def validate_recipe(recipe: PrintRecipe, total_pages: int) -> list[ValidationError]:
    """
    Collect every problem with a recipe for a document of `total_pages`.

    Returns an empty list when the recipe is valid.
    """
    errors: list[ValidationError] = []

    if recipe.pages != ALL_PAGES:
        try:
            count_pages(recipe.pages, total_pages)
        except ValidationError as exc:
            errors.append(exc)

    if recipe.copies < MIN_COPIES or recipe.copies > MAX_COPIES:
        errors.append(
            ValidationError(f"Copies must be between {MIN_COPIES} and {MAX_COPIES}", field="copies")
        )

    return errors


def ensure_valid_recipe(recipe: PrintRecipe, total_pages: int) -> None:
    errors = validate_recipe(recipe, total_pages)
    if errors:
        raise ValidationError(errors[0].message, field=errors[0].field, errors=errors)


def price_breakdown(
    recipe: PrintRecipe,
    total_pages: int,
    table: PriceTable = DEFAULT_PRICE_TABLE,
) -> PriceBreakdown:
    page_count = count_pages(recipe.pages, total_pages)

    raw = (
        Decimal(table.rate_for(recipe.color_mode))
        * page_count
        * recipe.copies
        * table.sides_multiplier(recipe.sides)
    )

    printing_cost = int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return PriceBreakdown(
        page_count=page_count,
        printing_cost_cents=max(printing_cost, 0),
        platform_fee_cents=table.platform_fee_cents,
    )


def compute_price_cents(
    recipe: PrintRecipe,
    total_pages: int,
    table: PriceTable = DEFAULT_PRICE_TABLE,
) -> int:
    """
    Price of one job in cents.

    Deterministic and non-negative for every valid recipe. Raises
    ValidationError (from the page parser) for malformed custom ranges.
    """
    return price_breakdown(recipe, total_pages, table).total_cents
