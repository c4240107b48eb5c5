from __future__ import annotations

"""Place-of-supply helpers.

The tax engine never guesses the supply type; these helpers derive it from
the supplier's GSTIN and the invoice's place of supply for callers that did
not send one explicitly.
"""

import re

from .gst_engine import SupplyType

GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
_LEADING_CODE_RE = re.compile(r"^\s*(\d{2})(?!\d)")

STATE_CODES: dict[str, str] = {
    "01": "Jammu and Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "26": "Dadra and Nagar Haveli and Daman and Diu",
    "27": "Maharashtra",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman and Nicobar Islands",
    "36": "Telangana",
    "37": "Andhra Pradesh",
    "38": "Ladakh",
    "97": "Other Territory",
}
_CODES_BY_NAME = {name.lower(): code for code, name in STATE_CODES.items()}


def is_valid_gstin(value: str) -> bool:
    """Return ``True`` if ``value`` has the shape of a GSTIN with a known state."""

    value = value.strip().upper()
    return bool(GSTIN_RE.match(value)) and value[:2] in STATE_CODES


def state_code(value: str | None) -> str | None:
    """Return the two-digit state code referenced by ``value``.

    ``value`` may be a GSTIN, a bare code (``"27"``), a code-prefixed label
    (``"27-Maharashtra"``) or a state name. Unknown values yield ``None``.
    """

    if not value:
        return None
    match = _LEADING_CODE_RE.match(value)
    if match:
        code = match.group(1)
        return code if code in STATE_CODES else None
    return _CODES_BY_NAME.get(value.strip().lower())


def supply_type_for(
    supplier_gstin: str | None,
    place_of_supply: str | None,
    customer_gstin: str | None = None,
) -> SupplyType:
    """Classify a supply as intra- or inter-state.

    The destination is the explicit ``place_of_supply`` when it names a state,
    otherwise the state of ``customer_gstin``. When either side is unknown the
    supply is treated as intra-state.
    """

    origin = state_code(supplier_gstin)
    destination = state_code(place_of_supply) or state_code(customer_gstin)
    if origin is None or destination is None or origin == destination:
        return SupplyType.INTRA_STATE
    return SupplyType.INTER_STATE
