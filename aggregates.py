"""
Dashboard figures derived from the student list.

All functions are pure and recomputed on every render; the lists involved are
small enough that nothing is cached.
"""
from collections import namedtuple
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Totals = namedtuple('Totals', 'total_students total_fee_collected total_potential_fee total_due_amount')

DashboardSummary = namedtuple(
    'DashboardSummary',
    'totals collection_rate class_counts dues_by_class',
)

TOP_DUE_CLASSES = 5


def standard_sort_key(label):
    """Order class labels by numeric value, so "9" comes before "10".

    Labels that are not numbers go after the numeric ones, in string order.
    """
    try:
        value = Decimal(label.strip())
    except (InvalidOperation, AttributeError):
        return (1, Decimal(0), str(label))
    if not value.is_finite():
        return (1, Decimal(0), label)
    return (0, value, label)


def sort_standards(labels):
    return sorted(set(labels), key=standard_sort_key)


def totals(students):
    collected = sum((s.paid_fee for s in students), Decimal(0))
    potential = sum((s.total_fee for s in students), Decimal(0))
    # Overpaid students reduce the due total; it is not floored at zero
    due = sum((s.due for s in students), Decimal(0))
    return Totals(
        total_students=len(students),
        total_fee_collected=collected,
        total_potential_fee=potential,
        total_due_amount=due,
    )


def collection_rate(summary_totals):
    """Percentage of potential fees collected, rounded half up. Can exceed 100 on overpayment."""
    potential = summary_totals.total_potential_fee
    if potential == 0:
        return 0
    rate = summary_totals.total_fee_collected * 100 / potential
    return int(rate.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def class_counts(students):
    counts = {}
    for s in students:
        counts[s.standard] = counts.get(s.standard, 0) + 1
    return [(standard, counts[standard]) for standard in sort_standards(counts)]


def dues_by_class(students, limit=TOP_DUE_CLASSES):
    """Classes with the largest outstanding dues, largest first.

    Only positive per-student dues count, and a class with nothing outstanding
    is left out. Equal amounts keep numeric class order.
    """
    dues = {}
    for s in students:
        due = s.due
        if due > 0:
            dues[s.standard] = dues.get(s.standard, Decimal(0)) + due
    ordered = sorted(sort_standards(dues), key=lambda standard: dues[standard], reverse=True)
    return [(standard, dues[standard]) for standard in ordered[:limit]]


def summarize(students):
    summary_totals = totals(students)
    return DashboardSummary(
        totals=summary_totals,
        collection_rate=collection_rate(summary_totals),
        class_counts=class_counts(students),
        dues_by_class=dues_by_class(students),
    )
