"""
Request history reports: a tabular PDF and an Excel-friendly CSV.
"""
import csv
import io
from typing import List, Optional, Sequence

from pickup_manager.domains.exports.layout import PdfDocument
from pickup_manager.domains.exports.slips import STATUS_LABELS
from pickup_manager.domains.state import AnyPickupRequest
from pickup_manager.schemas.pickup_request import HistoryFilter
from pickup_manager.utils.datetime_handler import DateTimeHandler

CSV_HEADER = ["Number", "Date", "BC number", "Location", "Contact", "Phone", "Status", "Containers", "Items", "Cost", "Notes"]

PDF_COLUMNS = [
    ("Number", 0.10, "left"),
    ("Date", 0.12, "left"),
    ("Location", 0.24, "left"),
    ("Contact", 0.18, "left"),
    ("Status", 0.12, "left"),
    ("Containers", 0.12, "right"),
    ("Cost", 0.12, "right"),
]


def _format_cost(cost: Optional[float]) -> str:
    return f"{cost:.2f}" if cost else ""


def _items_label(request: AnyPickupRequest) -> str:
    return ", ".join(f"{item.quantity} x {item.name}" for item in request.items)


def describe_filter(criteria: Optional[HistoryFilter]) -> str:
    if criteria is None:
        return "All requests"
    parts = []
    if criteria.status:
        parts.append(f"status {STATUS_LABELS.get(criteria.status.value, criteria.status.value)}")
    if criteria.date_from or criteria.date_to:
        start = DateTimeHandler.format_date(criteria.date_from) or "..."
        end = DateTimeHandler.format_date(criteria.date_to) or "..."
        parts.append(f"from {start} to {end}")
    if criteria.location:
        parts.append(f"location {criteria.location}")
    if criteria.search:
        parts.append(f'search "{criteria.search}"')
    return "Filtered by " + ", ".join(parts) if parts else "All requests"


def history_rows(requests: Sequence[AnyPickupRequest]) -> List[List[str]]:
    """One row per request, in CSV column order."""
    return [
        [
            request.display_number,
            DateTimeHandler.format_date(request.date),
            request.bc_number or "",
            request.location,
            request.contact_name,
            request.contact_phone,
            STATUS_LABELS.get(request.status.value, request.status.value),
            str(request.total_containers),
            _items_label(request),
            _format_cost(request.cost),
            request.notes or "",
        ]
        for request in requests
    ]


def render_history_csv(requests: Sequence[AnyPickupRequest]) -> bytes:
    """CSV encoded as UTF-8 with a byte order mark so Excel detects the encoding."""
    output = io.StringIO(newline="")
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    writer.writerows(history_rows(requests))
    return output.getvalue().encode("utf-8-sig")


def render_history_pdf(
        requests: Sequence[AnyPickupRequest],
        criteria: Optional[HistoryFilter] = None,
        size_name: Optional[str] = None,
) -> bytes:
    doc = PdfDocument("Pickup request history", size_name)
    doc.header_band(describe_filter(criteria))

    rows = [
        [
            request.display_number,
            DateTimeHandler.format_date(request.date),
            request.location,
            request.contact_name,
            STATUS_LABELS.get(request.status.value, request.status.value),
            str(request.total_containers),
            _format_cost(request.cost),
        ]
        for request in requests
    ]
    if rows:
        doc.table(PDF_COLUMNS, rows)
    else:
        doc.paragraph("No requests match these criteria.")

    total_cost = sum(request.cost or 0.0 for request in requests)
    doc.label_value("Requests", str(len(requests)))
    doc.label_value("Containers", str(sum(request.total_containers for request in requests)))
    doc.label_value("Total cost", f"{total_cost:.2f}")
    return doc.render()
