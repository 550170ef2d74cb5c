from decimal import Decimal

import aggregates
from conftest import make_student


def test_totals_of_empty_list():
    totals = aggregates.totals([])
    assert totals.total_students == 0
    assert totals.total_fee_collected == 0
    assert totals.total_potential_fee == 0
    assert totals.total_due_amount == 0
    assert aggregates.collection_rate(totals) == 0


def test_totals_sum_every_student():
    students = [
        make_student('5', 5000, 2000, name='a'),
        make_student('6', 3000, 3000, name='b'),
        make_student('6', '1200.50', '200.25', name='c'),
    ]
    totals = aggregates.totals(students)
    assert totals.total_students == 3
    assert totals.total_fee_collected == Decimal('5200.25')
    assert totals.total_potential_fee == Decimal('9200.50')
    assert totals.total_due_amount == Decimal('4000.25')


def test_due_total_is_reduced_by_overpayment():
    students = [
        make_student('5', 1000, 0, name='owes'),
        make_student('5', 1000, 1500, name='overpaid'),
    ]
    assert aggregates.totals(students).total_due_amount == Decimal('500')


def test_collection_rate_rounds_half_up():
    # 1 of 8 is 12.5%
    students = [make_student('5', 800, 100)]
    assert aggregates.collection_rate(aggregates.totals(students)) == 13


def test_collection_rate_can_exceed_hundred():
    students = [make_student('5', 1000, 1500)]
    assert aggregates.collection_rate(aggregates.totals(students)) == 150


def test_collection_rate_with_zero_potential():
    students = [make_student('5', 0, 0)]
    assert aggregates.collection_rate(aggregates.totals(students)) == 0


def test_standards_sort_numerically():
    assert aggregates.sort_standards(['10', '9', '12', '5', '9']) == ['5', '9', '10', '12']


def test_non_numeric_standards_go_last():
    assert aggregates.sort_standards(['Other', '11', 'A', '6']) == ['6', '11', 'A', 'Other']


def test_class_counts_in_numeric_order():
    students = [
        make_student('10', name='a'),
        make_student('9', name='b'),
        make_student('10', name='c'),
    ]
    assert aggregates.class_counts(students) == [('9', 1), ('10', 2)]


def test_dues_by_class_keeps_top_five_largest():
    students = [
        make_student(str(standard), total_fee=standard * 100, paid_fee=0, name=f's{standard}')
        for standard in range(5, 13)
    ]
    dues = aggregates.dues_by_class(students)
    assert [standard for standard, _ in dues] == ['12', '11', '10', '9', '8']
    assert dues[0] == ('12', Decimal('1200'))


def test_dues_by_class_ignores_paid_and_overpaid():
    students = [
        make_student('5', 1000, 1000, name='paid'),
        make_student('6', 1000, 2000, name='overpaid'),
        make_student('6', 1000, 400, name='owes'),
    ]
    # The overpayment in class 6 does not cancel the other student's due
    assert aggregates.dues_by_class(students) == [('6', Decimal('600'))]


def test_dues_by_class_ties_follow_class_order():
    students = [
        make_student('10', 500, 0, name='a'),
        make_student('9', 500, 0, name='b'),
        make_student('11', 700, 0, name='c'),
    ]
    assert [s for s, _ in aggregates.dues_by_class(students)] == ['11', '9', '10']


def test_summarize_bundles_everything():
    students = [make_student('7', 5000, 2000)]
    summary = aggregates.summarize(students)
    assert summary.totals.total_due_amount == Decimal('3000')
    assert summary.collection_rate == 40
    assert summary.class_counts == [('7', 1)]
    assert summary.dues_by_class == [('7', Decimal('3000'))]
