"""
PDF fee receipts (A5, one page) built with fpdf2.
"""
import re
from datetime import datetime

from fpdf import FPDF

from reminders import format_amount

PAGE_WIDTH = 148
PRIMARY_COLOR = (37, 99, 235)


def receipt_number(now_ms):
    return f'RCPT-{str(now_ms)[-6:]}'


def receipt_filename(student):
    return 'Receipt_%s.pdf' % re.sub(r'\s+', '_', student.name)


def _latin1(text):
    # Core PDF fonts only cover latin-1
    return str(text).encode('latin-1', 'replace').decode('latin-1')


def _label_value(pdf, x, y, label, value, value_x):
    pdf.set_font('helvetica', 'B', 10)
    pdf.text(x, y, label)
    pdf.set_font('helvetica', '', 10)
    pdf.text(value_x, y, _latin1(value))


def build_receipt(student, academy_name, now_ms):
    """Render a payment receipt for ``student`` and return the PDF bytes."""
    issued = datetime.fromtimestamp(now_ms / 1000)

    pdf = FPDF(orientation='P', unit='mm', format='A5')
    pdf.set_auto_page_break(False)
    pdf.add_page()

    # Header
    pdf.set_fill_color(248, 250, 252)
    pdf.rect(0, 0, PAGE_WIDTH, 40, style='F')

    pdf.set_xy(0, 9)
    pdf.set_font('helvetica', 'B', 18)
    pdf.set_text_color(*PRIMARY_COLOR)
    pdf.cell(PAGE_WIDTH, 10, _latin1(academy_name or 'Academy Receipt'), align='C')

    pdf.set_xy(0, 21)
    pdf.set_font('helvetica', '', 10)
    pdf.set_text_color(100)
    pdf.cell(PAGE_WIDTH, 6, 'FEE PAYMENT RECEIPT', align='C')

    # Details
    pdf.set_text_color(0)
    y = 50
    line_height = 8
    _label_value(pdf, 15, y, 'Receipt No:', receipt_number(now_ms), 45)
    _label_value(pdf, 85, y, 'Date:', issued.strftime('%d/%m/%Y'), 105)

    y += line_height * 2
    _label_value(pdf, 15, y, 'Student Name:', student.name, 45)
    y += line_height
    _label_value(pdf, 15, y, 'Class:', f'{student.standard}th Standard', 45)
    y += line_height
    _label_value(pdf, 15, y, 'Mobile:', student.whatsapp, 45)

    # Payment box
    y += 15
    pdf.set_draw_color(200)
    pdf.rect(15, y, 118, 30)

    y += 4
    pdf.set_xy(20, y)
    pdf.set_font('helvetica', '', 12)
    pdf.cell(50, 8, 'Total Amount Paid')
    pdf.set_xy(68, y)
    pdf.set_font('helvetica', 'B', 14)
    pdf.cell(60, 8, f'Rs. {format_amount(student.paid_fee)}/-', align='R')

    y += 11
    pdf.set_xy(28, y)
    pdf.set_font('helvetica', '', 9)
    pdf.set_text_color(100)
    pdf.cell(100, 6, f'(Out of Total Fees: Rs. {format_amount(student.total_fee)})', align='R')

    # Footer
    pdf.set_font('helvetica', '', 8)
    pdf.set_text_color(150)
    pdf.set_xy(0, 176)
    pdf.cell(PAGE_WIDTH, 5, 'This is a computer generated receipt.', align='C')
    pdf.set_xy(0, 181)
    pdf.cell(PAGE_WIDTH, 5, 'Thank you for your payment!', align='C')

    return bytes(pdf.output())
