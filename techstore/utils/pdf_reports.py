"""
PDF report generation utility.
Stock levels for the catalog and the best sellers podium.
"""
import io
from datetime import datetime
from decimal import Decimal
from typing import Dict, List
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.enums import TA_CENTER

from techstore.models import Product

class PDFReportGenerator:
    """Generate PDF reports for the catalog."""

    def __init__(self, app_name: str = "TechStore Inventory"):
        self.app_name = app_name
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=24,
            alignment=TA_CENTER,
            spaceAfter=30,
            textColor=colors.HexColor('#2c3e50')
        ))

        self.styles.add(ParagraphStyle(
            name='ReportSubtitle',
            parent=self.styles['Heading2'],
            fontSize=14,
            alignment=TA_CENTER,
            spaceAfter=20,
            textColor=colors.HexColor('#7f8c8d')
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontSize=16,
            spaceBefore=20,
            spaceAfter=10,
            textColor=colors.HexColor('#2980b9')
        ))

        self.styles.add(ParagraphStyle(
            name='NormalText',
            parent=self.styles['Normal'],
            fontSize=10,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.gray,
            alignment=TA_CENTER
        ))

    def _document(self, buffer: io.BytesIO) -> SimpleDocTemplate:
        return SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=72,
            leftMargin=72,
            topMargin=72,
            bottomMargin=72
        )

    def _header(self, title: str) -> list:
        return [
            Paragraph(title, self.styles['ReportTitle']),
            Paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
                      self.styles['ReportSubtitle']),
            Spacer(1, 20),
        ]

    def generate_stock_report(self, products: List[Product], low_stock_threshold: int,
                              report_title: str = "Stock Report") -> bytes:
        """
        Generate stock level PDF report.

        Args:
            products: Catalog rows, in display order
            low_stock_threshold: Products with stock below this are flagged

        Returns:
            PDF bytes
        """
        buffer = io.BytesIO()
        doc = self._document(buffer)
        story = self._header(report_title)

        total_items = len(products)
        out_of_stock = sum(1 for p in products if p.stock == 0)
        low_items = sum(1 for p in products if 0 < p.stock < low_stock_threshold)
        total_value = sum((Decimal(p.cost_price) * p.stock for p in products), Decimal('0'))

        summary_text = f"""
        <b>Summary:</b><br/>
        Total Products: {total_items}<br/>
        Out of Stock: {out_of_stock} products<br/>
        Low Stock (below {low_stock_threshold}): {low_items} products<br/>
        Stock Value at Cost: ${total_value:,.2f}<br/>
        """
        story.append(Paragraph(summary_text, self.styles['NormalText']))
        story.append(Spacer(1, 20))

        story.append(Paragraph("Current Stock Levels", self.styles['SectionHeader']))

        table_data = [['ID', 'SKU', 'Product', 'Price', 'Stock', 'Status']]
        flagged_rows = []

        for row_index, p in enumerate(products, start=1):
            if p.stock == 0:
                status = 'OUT'
            elif p.stock < low_stock_threshold:
                status = 'LOW'
            else:
                status = 'OK'
            if status != 'OK':
                flagged_rows.append(row_index)

            table_data.append([
                str(p.id),
                p.sku,
                p.name,
                f"${Decimal(p.price):,.2f}",
                str(p.stock),
                status,
            ])

        style = [
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2c3e50')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
            ('TEXTCOLOR', (0, 1), (-1, -1), colors.black),
            ('ALIGN', (3, 1), (4, -1), 'RIGHT'),
            ('ALIGN', (5, 1), (5, -1), 'CENTER'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 1, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
        ]
        for row_index in flagged_rows:
            style.append(('BACKGROUND', (0, row_index), (-1, row_index), colors.HexColor('#fdebd0')))

        table = Table(table_data, colWidths=[0.5*inch, 1.2*inch, 2.4*inch, 0.9*inch, 0.7*inch, 0.7*inch])
        table.setStyle(TableStyle(style))

        story.append(table)
        story.append(Spacer(1, 30))

        story.append(Paragraph(f"{self.app_name} - Stock Report", self.styles['Footer']))

        doc.build(story)

        buffer.seek(0)
        return buffer.getvalue()

    def generate_best_sellers_report(self, ranking: Dict[str, int]) -> bytes:
        """Best sellers podium: product name and units sold, in ranking order."""
        buffer = io.BytesIO()
        doc = self._document(buffer)
        story = self._header("Best Sellers")

        if not ranking:
            story.append(Paragraph("No sales recorded yet.", self.styles['NormalText']))
        else:
            table_data = [['Rank', 'Product', 'Units Sold']]
            for position, (name, quantity) in enumerate(ranking.items(), start=1):
                table_data.append([f"#{position}", name, str(quantity)])

            table = Table(table_data, colWidths=[0.8*inch, 3.5*inch, 1.2*inch])
            table.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#27ae60')),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('ALIGN', (2, 1), (2, -1), 'RIGHT'),
                ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ]))
            story.append(table)

        story.append(Spacer(1, 30))
        story.append(Paragraph(f"{self.app_name} - Best Sellers", self.styles['Footer']))

        doc.build(story)

        buffer.seek(0)
        return buffer.getvalue()
