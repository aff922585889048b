"""
PDF Quote Generator

Generates PDF quotes from processed quote results.
Uses reportlab for PDF generation.
"""

from datetime import date, datetime
from io import BytesIO
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from inkquote.delivery_dates import get_delivery_date, resolve_lead_time
from inkquote.domain import QuoteResult
from inkquote.service_pricing import TECHNIQUE_NAMES

HEADER_BLUE = colors.HexColor("#3498db")
TEXT_DARK = colors.HexColor("#2c3e50")
RULE_GREY = colors.HexColor("#e0e0e0")


def _money(amount: float) -> str:
    return f"€{amount:.2f}"


def _key_value_table(rows: List[List[str]]) -> Table:
    table = Table(rows, colWidths=[45*mm, 125*mm])
    table.setStyle(TableStyle([
        ('FONT', (0, 0), (0, -1), 'Helvetica-Bold', 10),
        ('FONT', (1, 0), (1, -1), 'Helvetica', 10),
        ('TEXTCOLOR', (0, 0), (-1, -1), TEXT_DARK),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    return table


def generate_quote_pdf(result: QuoteResult, issued_on: Optional[date] = None) -> bytes:
    """
    Generate a PDF quote from a processed quote.

    Args:
        result: Processed quote with its priced total
        issued_on: Quote date (today by default)

    Returns:
        PDF content as bytes

    The document includes:
    - Header, quote date, quote ID and expected delivery date
    - One row per item with unit price, fees, surcharges and total
    - Unpriced items with the reason and the quantity that unlocks pricing
    - Shipping, packaging, carton and vectorization add-ons
    - Grand total and disclaimer
    """
    issued_on = issued_on or datetime.now().date()
    buffer = BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=20*mm,
        leftMargin=20*mm,
        topMargin=20*mm,
        bottomMargin=20*mm
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'QuoteTitle',
        parent=styles['Heading1'],
        fontSize=24,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=12,
        alignment=TA_CENTER
    )

    heading_style = ParagraphStyle(
        'QuoteHeading',
        parent=styles['Heading2'],
        fontSize=14,
        textColor=TEXT_DARK,
        spaceAfter=6,
        spaceBefore=12
    )

    small_style = ParagraphStyle(
        'QuoteSmall',
        parent=styles['Normal'],
        fontSize=8,
        textColor=TEXT_DARK,
    )

    elements.append(Paragraph("Inkquote - Quote", title_style))
    elements.append(Spacer(1, 6*mm))

    lead_time = resolve_lead_time(result.delay)
    metadata = [
        ["Quote Date:", issued_on.isoformat()],
        ["Quote ID:", result.quote_id],
        ["Lead Time:", f"{lead_time:g} working day(s)" + (" (express)" if result.delay.is_express else "")],
        ["Expected Delivery:", get_delivery_date(result.delay, issued_on).isoformat()],
        ["Delivery:", result.delivery.mode.value.replace('_', ' ').title()],
    ]
    elements.append(_key_value_table(metadata))
    elements.append(Spacer(1, 8*mm))

    total = result.total
    if total is None:
        elements.append(Paragraph("Pricing unavailable", heading_style))
        for error in result.errors:
            elements.append(Paragraph(error, styles['Normal']))
    else:
        elements.append(Paragraph("Decoration", heading_style))

        item_rows = [["Item", "Technique", "Qty", "Unit", "Fees", "Options", "Express", "Total"]]
        unavailable_notes = []
        for detail in total.item_details:
            item = detail.item
            outcome = detail.outcome
            technique = TECHNIQUE_NAMES[item.technique]
            if outcome.available:
                item_rows.append([
                    Paragraph(item.product.name, small_style),
                    technique,
                    str(outcome.quantity),
                    _money(outcome.unit_price),
                    _money(outcome.fixed_fees),
                    _money(outcome.options_surcharge),
                    _money(outcome.express_surcharge),
                    _money(outcome.total),
                ])
            else:
                item_rows.append([
                    Paragraph(item.product.name, small_style),
                    technique,
                    str(item.total_quantity),
                    "-", "-", "-", "-",
                    "n/a",
                ])
                unavailable_notes.append(f"{item.product.name}: {outcome.message}")

        items_table = Table(
            item_rows,
            colWidths=[38*mm, 28*mm, 12*mm, 16*mm, 18*mm, 18*mm, 18*mm, 22*mm],
            repeatRows=1,
        )
        items_table.setStyle(TableStyle([
            ('FONT', (0, 0), (-1, 0), 'Helvetica-Bold', 9),
            ('FONT', (0, 1), (-1, -1), 'Helvetica', 8),
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_BLUE),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('TEXTCOLOR', (0, 1), (-1, -1), TEXT_DARK),
            ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('LINEBELOW', (0, 0), (-1, -1), 0.5, RULE_GREY),
        ]))
        elements.append(items_table)
        elements.append(Spacer(1, 4*mm))

        for note in unavailable_notes:
            elements.append(Paragraph(f"Not priced - {note}", small_style))

        elements.append(Paragraph("Summary", heading_style))

        summary_rows = [["Description", "Amount"]]
        if total.products_total:
            summary_rows.append(["Garments", _money(total.products_total)])
        summary_rows.append(["Decoration", _money(total.services_total)])
        if total.express_surcharge_total:
            summary_rows.append(["  incl. express surcharge", _money(total.express_surcharge_total)])
        summary_rows.append([f"Shipping ({total.cartons} carton(s))", _money(total.shipping_cost)])
        if total.packaging_cost:
            summary_rows.append(["Individual packaging", _money(total.packaging_cost)])
        if total.carton_cost:
            summary_rows.append(["New cartons", _money(total.carton_cost)])
        if total.vectorization_cost:
            summary_rows.append(["Artwork vectorization", _money(total.vectorization_cost)])
        summary_rows.append(["Grand Total", _money(total.grand_total)])

        summary_table = Table(summary_rows, colWidths=[85*mm, 85*mm])
        summary_table.setStyle(TableStyle([
            ('FONT', (0, 0), (-1, 0), 'Helvetica-Bold', 11),
            ('FONT', (0, 1), (-1, -1), 'Helvetica', 10),
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_BLUE),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('TEXTCOLOR', (0, 1), (-1, -1), TEXT_DARK),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('LINEBELOW', (0, 1), (-1, -2), 0.5, RULE_GREY),
            ('LINEABOVE', (0, -1), (-1, -1), 1.5, TEXT_DARK),
            ('FONT', (0, -1), (-1, -1), 'Helvetica-Bold', 11),
        ]))
        elements.append(summary_table)

        if not total.is_complete:
            elements.append(Spacer(1, 4*mm))
            elements.append(Paragraph(
                "<b>Incomplete quote:</b> some items could not be priced and are not included in the total.",
                styles['Normal'],
            ))

    elements.append(Spacer(1, 10*mm))
    disclaimer_style = ParagraphStyle(
        'Disclaimer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.HexColor('#7f8c8d'),
        alignment=TA_LEFT
    )
    disclaimer_text = """
    <b>Disclaimer:</b> All prices are in EUR and exclude VAT. Express lead times are
    subject to workshop approval. Quote valid for 30 days.
    """
    elements.append(Paragraph(disclaimer_text, disclaimer_style))

    doc.build(elements)

    pdf_bytes = buffer.getvalue()
    buffer.close()

    return pdf_bytes
