# services/workbook.py

from __future__ import annotations
import os, re, tempfile

import pandas as pd

from core.engine import format_usd
from core.models import Itinerary, PropertyConfig


def itinerary_frame(itin: Itinerary) -> pd.DataFrame:
    """
    One row per add-on line plus a final "Total" row.
    Columns: Item, Details, Amount (whole USD).
    """
    rows = [
        {"Item": i.label, "Details": i.note, "Amount": i.amount}
        for i in itin.line_items
    ]
    rows.append({"Item": "Total", "Details": "", "Amount": itin.total})
    return pd.DataFrame(rows, columns=["Item", "Details", "Amount"])


def generate_workbook(
    itin: Itinerary,
    prop: PropertyConfig,
    traveller_email: str,
    out_dir: str | None = None,
) -> str:
    """
    Écrit un XLSX avec deux onglets (Itinerary, Property) et renvoie son chemin.
    """
    out_dir = out_dir or tempfile.gettempdir()
    local_part = re.sub(r"[^A-Za-z0-9_.-]", "_", traveller_email.split("@")[0]) or "guest"
    xlsx_path = os.path.join(out_dir, f"itinerary_{local_part}.xlsx")

    df_items = itinerary_frame(itin)
    df_property = pd.DataFrame(
        [
            {"Field": "Property", "Value": prop.name},
            {"Field": "Address", "Value": prop.address},
            {"Field": "Dates", "Value": prop.dates_label},
            {"Field": "Estimated total", "Value": format_usd(itin.total)},
        ]
    )

    with pd.ExcelWriter(xlsx_path, engine="openpyxl") as writer:
        df_items.to_excel(writer, sheet_name="Itinerary", index=False)
        df_property.to_excel(writer, sheet_name="Property", index=False)

    return xlsx_path
