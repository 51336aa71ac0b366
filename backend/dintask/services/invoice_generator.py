"""
PDF invoice for a subscription payment, rendered with reportlab.
"""

from io import BytesIO
from typing import List

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.colors import HexColor
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from dintask.core.config import settings

BRAND = HexColor('#2563eb')
MUTED = HexColor('#94a3b8')

COMPANY_LINES = [
    "DinTask Solutions Pvt Ltd",
    "123 Business Avenue, Suite 101",
    "New Delhi, India, 110001",
    "GSTIN: 29ABCDE1234F1Z5",
]


class InvoiceGenerator:
    """Builds a one-page invoice/receipt for a Payment"""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='Brand',
            parent=self.styles['Title'],
            fontSize=24,
            textColor=BRAND,
            alignment=0,
            fontName='Helvetica-Bold'
        ))
        self.styles.add(ParagraphStyle(
            name='RightSmall',
            parent=self.styles['Normal'],
            fontSize=10,
            alignment=TA_RIGHT
        ))
        self.styles.add(ParagraphStyle(
            name='SectionLabel',
            parent=self.styles['Normal'],
            fontSize=10,
            textColor=BRAND,
            fontName='Helvetica-Bold',
            spaceBefore=12
        ))
        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontSize=9,
            textColor=MUTED,
            alignment=TA_CENTER
        ))

    def _lines(self, lines: List[str], style: str = 'Normal') -> List[Paragraph]:
        return [Paragraph(line, self.styles[style]) for line in lines]

    def generate(self, payment) -> bytes:
        """payment needs .admin and .plan loaded"""
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=50, leftMargin=50, topMargin=50, bottomMargin=50)

        admin = payment.admin
        plan_name = payment.plan.name if payment.plan else "Subscription Plan"
        currency = payment.currency or settings.PAYMENT_CURRENCY
        status = getattr(payment.status, "value", payment.status) or ""
        amount = f"{currency} {payment.amount}"

        story = [
            Paragraph("DinTask CRM", self.styles['Brand']),
            Paragraph("INVOICE / RECEIPT", self.styles['RightSmall']),
            Spacer(1, 8),
        ]
        story += self._lines(COMPANY_LINES)

        bill_to = [Paragraph("BILL TO:", self.styles['SectionLabel'])]
        bill_to += self._lines([admin.name, admin.company_name, admin.email] if admin else ["-"])

        details = [Paragraph("INVOICE DETAILS:", self.styles['SectionLabel'])]
        details += self._lines([
            f"Invoice Date: {payment.created_at.strftime('%d/%m/%Y')}",
            f"Order ID: {payment.razorpay_order_id}",
            f"Transaction ID: {payment.razorpay_payment_id or 'N/A'}",
            f"Status: {status.upper()}",
        ], 'RightSmall')

        header = Table([[bill_to, details]], colWidths=[250, 245])
        header.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
        story += [header, Spacer(1, 24)]

        items = Table(
            [
                ["DESCRIPTION", "UNIT PRICE", "QTY", "TOTAL"],
                [plan_name, amount, "1", amount],
                ["", "", "TOTAL AMOUNT:", amount],
            ],
            colWidths=[220, 110, 80, 85]
        )
        items.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor('#f8fafc')),
            ('TEXTCOLOR', (0, 0), (-1, 0), BRAND),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('LINEBELOW', (0, 1), (-1, 1), 0.5, HexColor('#e2e8f0')),
            ('FONTNAME', (2, 2), (-1, 2), 'Helvetica-Bold'),
            ('TEXTCOLOR', (2, 2), (2, 2), BRAND),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        story += [items, Spacer(1, 80)]

        story += self._lines([
            "This is a computer-generated document and does not require a signature.",
            "Thank you for choosing DinTask!",
        ], 'Footer')

        doc.build(story)
        return buffer.getvalue()


invoice_generator = InvoiceGenerator()
