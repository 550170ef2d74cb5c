"""
WhatsApp fee reminders: who is pending, whether a reminder may be sent now,
and the text and link handed to WhatsApp.
"""
import math
from collections import namedtuple
from urllib.parse import quote

COOLDOWN_HOURS = 24
MILLIS_PER_HOUR = 60 * 60 * 1000

WHATSAPP_URL = 'https://wa.me/{phone}?text={text}'

ReminderStatus = namedtuple('ReminderStatus', 'allowed hours_left')


def reminder_status(last_sent, now):
    """Check the cooldown for a student whose last reminder went out at ``last_sent`` (epoch ms).

    A reminder is blocked while fewer than COOLDOWN_HOURS have passed since the
    previous one. ``hours_left`` is for display only.
    """
    if last_sent is None:
        return ReminderStatus(allowed=True, hours_left=0)
    hours_elapsed = (now - last_sent) / MILLIS_PER_HOUR
    if hours_elapsed >= COOLDOWN_HOURS:
        return ReminderStatus(allowed=True, hours_left=0)
    return ReminderStatus(allowed=False, hours_left=COOLDOWN_HOURS - math.floor(hours_elapsed))


def pending_students(students, standard=None):
    pending = [s for s in students if s.due > 0]
    if standard:
        pending = [s for s in pending if s.standard == standard]
    return pending


def format_amount(amount):
    if amount == amount.to_integral_value():
        return f'{int(amount):,}'
    return f'{amount:,.2f}'


def reminder_message(student, academy_name):
    return (
        f'Hello {student.name}, this is a gentle reminder from {academy_name}. '
        f'You have a pending fee due of ₹{format_amount(student.due)}. '
        'Please clear it at your earliest convenience. Thank you.'
    )


def receipt_message(student, academy_name):
    return (
        f'Hello {student.name}, please find attached your fee receipt for '
        f'Rs. {format_amount(student.paid_fee)}. Thank you - {academy_name}'
    )


def whatsapp_link(phone, message):
    """Deep link that opens a chat with ``phone`` pre-filled with ``message``."""
    return WHATSAPP_URL.format(phone=quote(phone.strip(), safe='+'), text=quote(message, safe=''))
