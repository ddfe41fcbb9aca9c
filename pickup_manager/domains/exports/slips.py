"""
Printable pickup slips.
"""
import logging
from typing import Dict, List, Optional

from reportlab.lib.units import mm

from pickup_manager.core.constants import LOCATION_ADDRESSES
from pickup_manager.domains.exports.layout import MARGIN, PdfDocument
from pickup_manager.domains.state import AnyPickupRequest
from pickup_manager.models.pickup_request import RequestedItem
from pickup_manager.utils.datetime_handler import DateTimeHandler

logger = logging.getLogger(__name__)

QR_SIZE = 28 * mm

STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In progress",
    "completed": "Completed",
    "cancelled": "Cancelled",
}

ITEM_COLUMNS = [
    ("Container", 0.62, "left"),
    ("Quantity", 0.16, "center"),
    ("Replace bin", 0.22, "center"),
]


def _item_rows(items: List[RequestedItem]) -> List[List[str]]:
    return [
        [item.name + (" (custom)" if item.custom else ""), str(item.quantity), "Yes" if item.replace_bin else "No"]
        for item in items
    ]


def _items_by_site(request: AnyPickupRequest) -> Dict[str, List[RequestedItem]]:
    grouped: Dict[str, List[RequestedItem]] = {site: [] for site in request.sites}
    for item in request.items:
        grouped.setdefault(request.item_site(item), []).append(item)
    return grouped


def _address(site: str) -> str:
    address = LOCATION_ADDRESSES.get(site)
    return address["full_address"] if address else site


def _draw_summary_blocks(doc: PdfDocument, request: AnyPickupRequest) -> None:
    """Requester block on the left, details block and QR code on the right."""
    top = doc.y
    doc.pdf.setFont("Helvetica-Bold", 11)
    doc.pdf.drawString(MARGIN, top, "Requester")
    doc.y = top - 15
    doc.label_value("Contact", request.contact_name)
    doc.label_value("Phone", request.contact_phone)
    doc.label_value("BC number", request.bc_number or "-")
    left_bottom = doc.y

    column = MARGIN + doc.content_width / 2 - 10 * mm
    doc.pdf.setFont("Helvetica-Bold", 11)
    doc.pdf.drawString(column, top, "Details")
    doc.y = top - 15
    doc.label_value("Date", DateTimeHandler.format_date(request.date), x=column)
    doc.label_value("Number", request.display_number, x=column)
    doc.label_value("Status", STATUS_LABELS.get(request.status.value, request.status.value), x=column)
    right_bottom = doc.y

    doc.qr_code(request.id, QR_SIZE, doc.width - MARGIN - QR_SIZE, top - QR_SIZE + 10)
    doc.y = min(left_bottom, right_bottom, top - QR_SIZE) - 6 * mm


def render_single_slip(request: AnyPickupRequest, size_name: Optional[str] = None) -> bytes:
    """
    Pickup slip for a request covering one site.

    Args:
        request: The request to print
        size_name: "letter" or "a4"; defaults to the configured size

    Returns:
        PDF document bytes
    """
    doc = PdfDocument(f"Pickup slip {request.display_number}", size_name)
    doc.header_band(_address(request.location))
    _draw_summary_blocks(doc, request)

    doc.heading("Containers")
    doc.table(ITEM_COLUMNS, _item_rows(request.items))
    doc.label_value("Total", f"{request.total_containers} containers")

    if request.notes:
        doc.y -= 4 * mm
        doc.boxed_text("Notes", request.notes)

    return doc.render()


def render_multi_slip(request: AnyPickupRequest, size_name: Optional[str] = None) -> bytes:
    """
    Pickup slip for a request covering several sites, one section per site.

    Returns:
        PDF document bytes
    """
    grouped = _items_by_site(request)

    doc = PdfDocument(f"Multi-site pickup slip {request.display_number}", size_name)
    doc.header_band(f"{len(grouped)} sites")
    _draw_summary_blocks(doc, request)

    for site, items in grouped.items():
        doc.ensure_space(60 * mm)
        doc.heading(site, size=13)
        doc.paragraph(_address(site), font_size=9)
        comment = request.location_comments.get(site)
        if comment:
            doc.boxed_text("Site comments", comment)
        doc.table(ITEM_COLUMNS, _item_rows(items))
        doc.label_value("Subtotal", f"{sum(item.quantity for item in items)} containers")
        doc.y -= 4 * mm

    doc.ensure_space(30 * mm)
    doc.heading("Summary")
    doc.label_value("Containers", str(request.total_containers))
    doc.label_value("Sites", str(len(grouped)))

    if request.notes:
        doc.y -= 4 * mm
        doc.boxed_text("Notes", request.notes)

    return doc.render()


def render_pickup_slip(request: AnyPickupRequest, size_name: Optional[str] = None) -> bytes:
    """Pick the single or multi-site layout from the number of sites."""
    if len(request.sites) > 1:
        content = render_multi_slip(request, size_name)
    else:
        content = render_single_slip(request, size_name)
    logger.info(f"Rendered pickup slip for request {request.display_number} ({len(content)} bytes)")
    return content
