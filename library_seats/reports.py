"""
reports.py
Revenue summary and roster exports (Excel via pandas, PDF via reportlab).
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from library_seats import config

ROSTER_COLUMNS = [
    "id", "full_name", "mobile", "seat_number", "slots", "locker_required",
    "plan_type", "duration", "start_date", "end_date", "amount_paid",
    "payment_mode", "is_active",
]


def roster_frame(students) -> pd.DataFrame:
    data = []
    for s in sorted(students, key=lambda s: (s.seat_number, s.sorted_slots())):
        data.append({
            "id": s.id,
            "full_name": s.full_name,
            "mobile": s.mobile,
            "seat_number": s.seat_number,
            "slots": ",".join(slot.value for slot in s.sorted_slots()),
            "locker_required": s.locker_required,
            "plan_type": s.plan_type.value,
            "duration": s.duration.value,
            "start_date": s.start_date.isoformat(),
            "end_date": s.end_date.isoformat(),
            "amount_paid": s.amount_paid,
            "payment_mode": s.payment_mode.value,
            "is_active": s.is_active,
        })
    return pd.DataFrame(data, columns=ROSTER_COLUMNS)


def revenue_summary_by_month(transactions) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"month": tx.date.strftime("%Y-%m"), "revenue": tx.amount} for tx in transactions]
    )
    if df.empty:
        return pd.DataFrame(columns=["month", "revenue"])
    return (
        df.groupby("month", as_index=False)["revenue"].sum()
        .sort_values("month", ascending=False)
        .reset_index(drop=True)
    )


def _export_path(filename, export_dir=None) -> Path:
    export_dir = Path(export_dir or config.EXPORT_DIR)
    export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir / filename


def export_roster_excel(students, export_dir=None) -> Path:
    file_path = _export_path("students.xlsx", export_dir)
    roster_frame(students).to_excel(file_path, index=False)
    return file_path


def export_roster_pdf(students, export_dir=None) -> Path:
    file_path = _export_path("students.pdf", export_dir)

    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    y = height - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(50, y, "Seat Roster")
    y -= 30

    c.setFont("Helvetica", 10)
    c.drawString(50, y, "Seat")
    c.drawString(90, y, "Name")
    c.drawString(250, y, "Mobile")
    c.drawString(340, y, "Slots")
    c.drawString(420, y, "Plan")
    c.drawString(470, y, "Ends")
    y -= 15

    c.line(50, y, 550, y)
    y -= 15

    for _, row in roster_frame(students).iterrows():
        if y < 60:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = height - 50

        c.drawString(50, y, str(row["seat_number"]))
        c.drawString(90, y, str(row["full_name"])[:28])
        c.drawString(250, y, str(row["mobile"]))
        c.drawString(340, y, row["slots"])
        c.drawString(420, y, row["plan_type"])
        c.drawString(470, y, row["end_date"])
        y -= 15

    c.save()
    return file_path
