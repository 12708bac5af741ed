# services/exports.py

import csv
from datetime import date
from typing import List, Sequence, Tuple

import pandas as pd
from fastapi.responses import Response


# (row key, CSV header) pairs per screen
MEMBER_EXPORT_COLUMNS = [
    ("id", "ID"),
    ("full_name", "Name"),
    ("email", "Email"),
    ("mobile_phone", "Phone"),
    ("role", "Role"),
    ("default_mode", "Default Mode"),
    ("country", "Country"),
    ("state", "State"),
    ("city", "City"),
    ("zipcode", "Zip Code"),
    ("created_at", "Created At"),
]

SELLER_EXPORT_COLUMNS = [
    ("user_id", "ID"),
    ("store_name", "Store Name"),
    ("user_name", "Owner Name"),
    ("user_email", "Email"),
    ("user_phone", "Phone"),
    ("user_country", "Country"),
    ("user_state", "State"),
    ("user_city", "City"),
    ("is_approved", "Approved"),
    ("description", "Description"),
    ("user_created_at", "Created At"),
]

ORDER_EXPORT_COLUMNS = [
    ("id", "ID"),
    ("buyer_name", "Buyer Name"),
    ("buyer_email", "Buyer Email"),
    ("listing_name", "Product"),
    ("price", "Price"),
    ("seller_name", "Seller"),
    ("quantity", "Quantity"),
    ("status", "Status"),
    ("note", "Note"),
    ("created_at", "Created At"),
]


def export_filename(prefix: str, extension: str = "csv") -> str:
    return f"{prefix}-export-{date.today().isoformat()}.{extension}"


def rows_to_csv(rows: List[dict], columns: Sequence[Tuple[str, str]]) -> str:
    """
    Render rows as CSV with every cell quoted.
    Missing keys and nulls become empty cells. No rows gives an empty string.
    """
    if not rows:
        return ""

    keys = [key for key, _ in columns]
    frame = pd.DataFrame([{key: row.get(key) for key in keys} for row in rows], columns=keys)
    frame = frame.astype(object).where(frame.notna(), "")
    frame.columns = [label for _, label in columns]

    return frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n").rstrip("\n")


def csv_response(rows: List[dict], columns: Sequence[Tuple[str, str]], prefix: str) -> Response:
    return Response(
        content=rows_to_csv(rows, columns),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(prefix)}"'},
    )
