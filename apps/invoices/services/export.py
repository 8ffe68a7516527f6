"""
Invoice export to PDF (reportlab) and JPEG (Pillow).

Branding follows the user's tier: the logo needs ``has_logo``, the store's
brand colour ``has_custom_colors`` and the signature image ``has_signature``.
Logos and signatures are only rendered from ``data:`` URIs.
"""

import base64
import binascii
import io
import logging
import re

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from apps.stores.services import get_primary_contact
from apps.subscriptions.exceptions import FeatureNotAvailable
from apps.subscriptions.pricing import TIER_FEATURES
from apps.subscriptions.services import get_export_qualities, get_user_features

from .calculations import format_rupiah
from .exceptions import InvalidExportQualityError
from .invoice_management import get_invoice

logger = logging.getLogger(__name__)

DEFAULT_BRAND_COLOR = '#10b981'

# scale: multiplier of the base canvas, max_kb: size cap (None = no cap)
QUALITY_PRESETS = {
    'standard': {'scale': 1, 'max_kb': 100, 'jpeg_quality': 85},
    'high': {'scale': 2, 'max_kb': 150, 'jpeg_quality': 90},
    'print-ready': {'scale': 3, 'max_kb': None, 'jpeg_quality': 95},
}

MIN_JPEG_QUALITY = 20
JPEG_BASE_WIDTH = 800

_UNSAFE_CHARS = re.compile(r'[/\\?%*:|"<>]')
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x80-\x9f]')


# =============================================================================
# Filenames
# =============================================================================

def sanitize_filename(name: str) -> str:
    """Make a user-supplied string safe to use in a download filename."""
    sanitized = _UNSAFE_CHARS.sub('', name or '')
    sanitized = sanitized.replace('..', '')
    sanitized = _CONTROL_CHARS.sub('', sanitized)
    sanitized = re.sub(r'\s+', '_', sanitized)
    sanitized = re.sub(r'_+', '_', sanitized)
    sanitized = sanitized.strip('_')
    return sanitized[:50] or 'file'


def export_filename(invoice, ext: str) -> str:
    customer = sanitize_filename(invoice.customer_name or 'Customer')
    return f"Invoice_{customer}_{invoice.invoice_date:%d%m%Y}.{ext}"


# =============================================================================
# Shared content
# =============================================================================

def _decode_data_uri(value):
    """Bytes of a base64 ``data:`` URI, or None."""
    if not value or not value.startswith('data:') or ';base64,' not in value:
        return None
    try:
        return base64.b64decode(value.split(';base64,', 1)[1], validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Ignoring malformed data URI image")
        return None


def _open_image(value):
    raw = _decode_data_uri(value)
    if raw is None:
        return None
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError):
        logger.warning("Ignoring unreadable embedded image")
        return None
    return image


def _branding(store, features: dict) -> dict:
    features = features or TIER_FEATURES['free']
    contact = get_primary_contact(store=store) if store is not None else None

    brand_color = DEFAULT_BRAND_COLOR
    if store is not None and features.get('has_custom_colors') and store.brand_color:
        brand_color = store.brand_color

    contact_parts = []
    if store is not None:
        contact_parts = [p for p in (store.address, store.whatsapp, store.email, store.website) if p]

    return {
        'store_name': store.name if store is not None else 'Invoice',
        'tagline': store.tagline if store is not None else None,
        'contact_line': ' | '.join(contact_parts),
        'payment_method': store.payment_method if store is not None else None,
        'brand_color': brand_color,
        'logo': _open_image(store.logo) if store is not None and features.get('has_logo') else None,
        'signer': contact,
        'signature': _open_image(contact.signature) if contact and features.get('has_signature') else None,
    }


def _item_rows(invoice) -> list:
    rows = []
    for item in invoice.items.all():
        if item.is_buyback:
            rate = item.custom_buyback_rate if item.custom_buyback_rate is not None else item.buyback_rate
            detail = f"{item.gram:g} g x {format_rupiah(rate)}"
        else:
            detail = f"{item.quantity} x {format_rupiah(item.price)}"
        rows.append((item.description, detail, format_rupiah(item.subtotal)))
    return rows


def _total_rows(invoice) -> list:
    rows = [('Subtotal', format_rupiah(invoice.subtotal))]
    if invoice.tax_amount:
        rows.append((f"Tax ({invoice.tax_percentage:g}%)", format_rupiah(invoice.tax_amount)))
    if invoice.shipping_cost:
        rows.append(('Shipping', format_rupiah(invoice.shipping_cost)))
    rows.append(('Total', format_rupiah(invoice.total)))
    return rows


# =============================================================================
# PDF
# =============================================================================

def render_invoice_pdf(invoice, store=None, features: dict = None) -> bytes:
    """
    Render an invoice as a one-column A4 PDF.

    Args:
        invoice: Invoice with items
        store: Issuing store, or None
        features: Tier feature dict deciding logo, colour and signature

    Returns:
        PDF bytes
    """
    brand = _branding(store, features)
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"Invoice {invoice.invoice_number}")
    width, height = A4
    margin = 18 * mm
    brand_color = colors.HexColor(brand['brand_color'])

    # Header band
    band_height = 32 * mm
    pdf.setFillColor(brand_color)
    pdf.rect(0, height - band_height, width, band_height, stroke=0, fill=1)

    text_x = margin
    if brand['logo'] is not None:
        pdf.drawImage(
            ImageReader(brand['logo']),
            margin, height - band_height + 6 * mm,
            width=20 * mm, height=20 * mm,
            preserveAspectRatio=True, mask='auto',
        )
        text_x += 24 * mm

    pdf.setFillColor(colors.white)
    pdf.setFont('Helvetica-Bold', 18)
    pdf.drawString(text_x, height - 14 * mm, brand['store_name'])
    pdf.setFont('Helvetica', 9)
    if brand['tagline']:
        pdf.drawString(text_x, height - 20 * mm, brand['tagline'])
    if brand['contact_line']:
        pdf.drawString(text_x, height - 26 * mm, brand['contact_line'][:110])

    # Invoice meta and bill-to
    y = height - band_height - 12 * mm
    pdf.setFillColor(colors.black)
    pdf.setFont('Helvetica-Bold', 12)
    pdf.drawString(margin, y, 'INVOICE')
    pdf.setFont('Helvetica', 10)
    pdf.drawRightString(width - margin, y, invoice.invoice_number)
    y -= 5 * mm
    pdf.drawRightString(width - margin, y, f"{invoice.invoice_date:%d/%m/%Y}")

    y -= 8 * mm
    pdf.setFont('Helvetica-Bold', 10)
    pdf.drawString(margin, y, 'Bill to')
    pdf.setFont('Helvetica', 10)
    for line in (invoice.customer_name, invoice.customer_phone, invoice.customer_address, invoice.customer_email):
        if line:
            y -= 5 * mm
            pdf.drawString(margin, y, str(line)[:90])

    # Items
    y -= 10 * mm
    pdf.setFillColor(brand_color)
    pdf.rect(margin, y - 2 * mm, width - 2 * margin, 7 * mm, stroke=0, fill=1)
    pdf.setFillColor(colors.white)
    pdf.setFont('Helvetica-Bold', 10)
    pdf.drawString(margin + 2 * mm, y, 'Description')
    pdf.drawString(margin + 95 * mm, y, 'Qty / Rate')
    pdf.drawRightString(width - margin - 2 * mm, y, 'Amount')

    pdf.setFillColor(colors.black)
    pdf.setFont('Helvetica', 10)
    for description, detail, amount in _item_rows(invoice):
        y -= 7 * mm
        if y < 40 * mm:
            pdf.showPage()
            pdf.setFont('Helvetica', 10)
            y = height - margin
        pdf.drawString(margin + 2 * mm, y, description[:55])
        pdf.drawString(margin + 95 * mm, y, detail)
        pdf.drawRightString(width - margin - 2 * mm, y, amount)

    # Totals
    y -= 4 * mm
    pdf.line(margin + 90 * mm, y, width - margin, y)
    for label, amount in _total_rows(invoice):
        y -= 6 * mm
        pdf.setFont('Helvetica-Bold' if label == 'Total' else 'Helvetica', 10)
        pdf.drawString(margin + 95 * mm, y, label)
        pdf.drawRightString(width - margin - 2 * mm, y, amount)

    if invoice.note:
        y -= 10 * mm
        pdf.setFont('Helvetica-Oblique', 9)
        pdf.drawString(margin, y, invoice.note[:120])

    if brand['payment_method']:
        y -= 6 * mm
        pdf.setFont('Helvetica', 9)
        pdf.drawString(margin, y, f"Payment: {brand['payment_method'][:110]}")

    # Signature
    signer = brand['signer']
    if signer is not None:
        sign_x = width - margin - 50 * mm
        y -= 12 * mm
        if brand['signature'] is not None:
            pdf.drawImage(
                ImageReader(brand['signature']),
                sign_x, y - 18 * mm,
                width=40 * mm, height=16 * mm,
                preserveAspectRatio=True, mask='auto',
            )
        y -= 22 * mm
        pdf.setFont('Helvetica-Bold', 10)
        pdf.drawString(sign_x, y, signer.name)
        if signer.title:
            pdf.setFont('Helvetica', 9)
            pdf.drawString(sign_x, y - 4 * mm, signer.title)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


# =============================================================================
# JPEG
# =============================================================================

def _font(size: int):
    return ImageFont.load_default(size=size)


def _draw_invoice_image(invoice, brand: dict, scale: int) -> Image.Image:
    rows = _item_rows(invoice)
    totals = _total_rows(invoice)
    width = JPEG_BASE_WIDTH * scale
    unit = 10 * scale
    height = unit * (40 + 4 * len(rows) + 4 * len(totals) + (14 if brand['signer'] else 0))

    image = Image.new('RGB', (width, height), 'white')
    draw = ImageDraw.Draw(image)
    margin = 4 * unit

    # Header band
    band = 12 * unit
    draw.rectangle([0, 0, width, band], fill=brand['brand_color'])
    text_x = margin
    if brand['logo'] is not None:
        logo = brand['logo'].convert('RGBA')
        logo.thumbnail((band - 2 * unit, band - 2 * unit))
        image.paste(logo, (margin, unit), logo)
        text_x += logo.width + unit
    draw.text((text_x, 2 * unit), brand['store_name'], fill='white', font=_font(3 * unit))
    if brand['tagline']:
        draw.text((text_x, 6 * unit), brand['tagline'], fill='white', font=_font(int(1.4 * unit)))
    if brand['contact_line']:
        draw.text((text_x, 9 * unit), brand['contact_line'][:110], fill='white', font=_font(int(1.2 * unit)))

    body = _font(int(1.5 * unit))
    bold = _font(int(1.8 * unit))
    y = band + 3 * unit
    draw.text((margin, y), 'INVOICE', fill='black', font=bold)
    draw.text((width - margin, y), invoice.invoice_number, fill='black', font=body, anchor='ra')
    y += 3 * unit
    draw.text((width - margin, y), f"{invoice.invoice_date:%d/%m/%Y}", fill='black', font=body, anchor='ra')

    y += 3 * unit
    draw.text((margin, y), 'Bill to', fill='black', font=bold)
    for line in (invoice.customer_name, invoice.customer_phone, invoice.customer_address):
        if line:
            y += 2.5 * unit
            draw.text((margin, y), str(line)[:80], fill='black', font=body)

    y += 4 * unit
    draw.rectangle([margin, y, width - margin, y + 3 * unit], fill=brand['brand_color'])
    draw.text((margin + unit, y + 0.5 * unit), 'Description', fill='white', font=body)
    draw.text((width - margin - unit, y + 0.5 * unit), 'Amount', fill='white', font=body, anchor='ra')
    y += 3 * unit
    for description, detail, amount in rows:
        y += unit
        draw.text((margin + unit, y), description[:60], fill='black', font=body)
        draw.text((margin + unit, y + 1.8 * unit), detail, fill='#6b7280', font=_font(int(1.2 * unit)))
        draw.text((width - margin - unit, y), amount, fill='black', font=body, anchor='ra')
        y += 3 * unit

    y += unit
    draw.line([width // 2, y, width - margin, y], fill='#d1d5db', width=max(scale, 1))
    for label, amount in totals:
        y += 2.5 * unit
        font = bold if label == 'Total' else body
        draw.text((width // 2, y), label, fill='black', font=font)
        draw.text((width - margin - unit, y), amount, fill='black', font=font, anchor='ra')

    signer = brand['signer']
    if signer is not None:
        y += 4 * unit
        sign_x = width - margin - 22 * unit
        if brand['signature'] is not None:
            signature = brand['signature'].convert('RGBA')
            signature.thumbnail((20 * unit, 7 * unit))
            image.paste(signature, (int(sign_x), int(y)), signature)
        y += 8 * unit
        draw.text((sign_x, y), signer.name, fill='black', font=bold)
        if signer.title:
            draw.text((sign_x, y + 2.5 * unit), signer.title, fill='#6b7280', font=body)

    return image


def _encode_jpeg(image: Image.Image, preset: dict) -> bytes:
    """JPEG bytes; size-capped presets lower the quality until they fit."""
    quality = preset['jpeg_quality']
    max_bytes = preset['max_kb'] * 1024 if preset['max_kb'] else None
    dpi = (300, 300) if preset['max_kb'] is None else (72 * preset['scale'], 72 * preset['scale'])

    while True:
        buffer = io.BytesIO()
        image.save(buffer, format='JPEG', quality=quality, optimize=True, dpi=dpi)
        data = buffer.getvalue()
        if max_bytes is None or len(data) <= max_bytes or quality <= MIN_JPEG_QUALITY:
            return data
        quality -= 10


def render_invoice_jpeg(invoice, store=None, quality: str = 'standard', features: dict = None) -> bytes:
    """
    Render an invoice as JPEG with one of the ``QUALITY_PRESETS``.

    Raises:
        InvalidExportQualityError: If the preset does not exist
    """
    preset = QUALITY_PRESETS.get(quality)
    if preset is None:
        raise InvalidExportQualityError(f"Unknown export quality: {quality}")

    image = _draw_invoice_image(invoice, _branding(store, features), preset['scale'])
    data = _encode_jpeg(image, preset)
    logger.debug("Rendered %s JPEG of %d KB", quality, len(data) // 1024)
    return data


# =============================================================================
# Entry points
# =============================================================================

def export_invoice_pdf(*, user, invoice_id) -> tuple:
    """Returns ``(filename, pdf_bytes)`` for one of the user's invoices."""
    invoice = get_invoice(invoice_id=invoice_id, user=user)
    data = render_invoice_pdf(invoice, invoice.store, get_user_features(user=user))
    return export_filename(invoice, 'pdf'), data


def export_invoice_jpeg(*, user, invoice_id, quality: str = 'standard') -> tuple:
    """
    Returns ``(filename, jpeg_bytes)``.

    Raises:
        InvalidExportQualityError: If the preset does not exist
        FeatureNotAvailable: If the preset is not in the user's tier
    """
    if quality not in QUALITY_PRESETS:
        raise InvalidExportQualityError(f"Unknown export quality: {quality}")
    if quality not in get_export_qualities(user=user):
        raise FeatureNotAvailable(f"{quality} export requires a Premium subscription.")

    invoice = get_invoice(invoice_id=invoice_id, user=user)
    data = render_invoice_jpeg(invoice, invoice.store, quality, get_user_features(user=user))
    return export_filename(invoice, 'jpg'), data
