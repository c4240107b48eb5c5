from __future__ import annotations

"""GST calculation for invoice line items.

Every amount is computed with :class:`~decimal.Decimal` at full precision and
rounded to ₹0.01 only when it leaves the engine. Invoice aggregates are the
rounded sums of the unrounded line values, so ``subtotal`` can differ by a
paisa from a re-sum of the rounded line amounts. Both the preview endpoint and
the invoice save path call :func:`compute_totals`; they must not round
anything themselves.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Sequence

ROUND = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")
NIL = Decimal("0.00")
# Scale of the stored line columns
INPUT_PLACES = 4


class SupplyType(str, Enum):
    """Tax treatment of a supply based on its place of supply."""

    INTRA_STATE = "intra_state"  # CGST + SGST
    INTER_STATE = "inter_state"  # IGST


class ValidationError(ValueError):
    """Raised when a line item or invoice breaks an input precondition."""

    def __init__(self, field: str | None, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class LineItemInput:
    """Single invoice row as entered, before any tax is applied."""

    description: str
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal
    hsn: str | None = None


@dataclass(frozen=True)
class LineItemResult:
    """Priced invoice row; every money field is rounded to two places."""

    description: str
    hsn: str | None
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal
    amount: Decimal
    tax_amount: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal


def money(value: Decimal) -> Decimal:
    """Round ``value`` to paise using half-up rounding."""

    return value.quantize(ROUND, rounding=ROUND_HALF_UP)


def _number(value: object, field: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(field, f"{field} must be a number") from exc
    if not number.is_finite():
        raise ValidationError(field, f"{field} must be a finite number")
    if number.normalize().as_tuple().exponent < -INPUT_PLACES:
        raise ValidationError(
            field, f"{field} allows at most {INPUT_PLACES} decimal places"
        )
    return number


def _supply(supply: SupplyType | str) -> SupplyType:
    try:
        return SupplyType(supply)
    except ValueError as exc:
        raise ValidationError("supply_type", f"Unsupported supply type: {supply}") from exc


def _price(line: LineItemInput) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal]:
    """Validate ``line`` and return quantity, rate, GST rate, amount and tax unrounded."""

    quantity = _number(line.quantity, "quantity")
    rate = _number(line.rate, "rate")
    gst_rate = _number(line.gst_rate, "gst_rate")
    if quantity <= ZERO:
        raise ValidationError("quantity", "Qty > 0")
    if rate < ZERO:
        raise ValidationError("rate", "Rate >= 0")
    if gst_rate < ZERO:
        raise ValidationError("gst_rate", "GST rate >= 0")
    if not (line.description or "").strip():
        raise ValidationError("description", "Description required")
    amount = quantity * rate
    tax = amount * gst_rate / HUNDRED
    return quantity, rate, gst_rate, amount, tax


def _split(tax: Decimal, supply: SupplyType) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(cgst, sgst, igst)`` for an unrounded tax amount.

    CGST and SGST are each half the tax, rounded on their own. When the tax
    has an odd paisa their sum is one paisa off the rounded tax.
    """

    if supply is SupplyType.INTER_STATE:
        return NIL, NIL, money(tax)
    half = money(tax / 2)
    return half, half, NIL


def _result(
    line: LineItemInput, priced: tuple[Decimal, ...], supply: SupplyType
) -> LineItemResult:
    quantity, rate, gst_rate, amount, tax = priced
    cgst, sgst, igst = _split(tax, supply)
    return LineItemResult(
        description=line.description,
        hsn=line.hsn,
        quantity=quantity,
        rate=rate,
        gst_rate=gst_rate,
        amount=money(amount),
        tax_amount=money(tax),
        cgst=cgst,
        sgst=sgst,
        igst=igst,
    )


def compute_line(line: LineItemInput, supply: SupplyType | str) -> LineItemResult:
    """Price a single line item under ``supply``.

    Raises
    ------
    ValidationError
        If quantity is not positive, rate or GST rate is negative, a number has
        more than four decimal places or the description is blank.
    """

    supply = _supply(supply)
    return _result(line, _price(line), supply)


def compute_totals(
    lines: Sequence[LineItemInput], supply: SupplyType | str
) -> tuple[list[LineItemResult], InvoiceTotals]:
    """Price every line and derive the invoice totals.

    Parameters
    ----------
    lines:
        Line items in display order. Order has no effect on the numbers.
    supply:
        Intra-state or inter-state treatment applied to every line.

    Returns
    -------
    tuple
        The priced lines in input order and the :class:`InvoiceTotals`.

    Every line is validated before any aggregate is computed. A failing line is
    reported as ``items.<index>.<field>``.

    Examples
    --------
    >>> line = LineItemInput("Audit fee", Decimal("2"), Decimal("500"), Decimal("18"))
    >>> _, totals = compute_totals([line], SupplyType.INTRA_STATE)
    >>> totals.total
    Decimal('1180.00')
    """

    supply = _supply(supply)
    if not lines:
        raise ValidationError("items", "at least one line item required")

    priced = []
    for index, line in enumerate(lines):
        try:
            priced.append(_price(line))
        except ValidationError as exc:
            raise ValidationError(f"items.{index}.{exc.field}", exc.message) from exc

    results = [_result(line, p, supply) for line, p in zip(lines, priced)]
    subtotal = money(sum((p[3] for p in priced), ZERO))
    tax_total = money(sum((p[4] for p in priced), ZERO))
    totals = InvoiceTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        total=money(subtotal + tax_total),
    )
    return results, totals


__all__ = [
    "InvoiceTotals",
    "LineItemInput",
    "LineItemResult",
    "SupplyType",
    "ValidationError",
    "compute_line",
    "compute_totals",
    "money",
]
