from import_engine.duplicates import DuplicateTracker
from import_engine.row_processor import CandidateRow


def _row(name, barcode=None):
    return CandidateRow(name=name, barcode=barcode, price=1, stock=1)


def test_first_occurrence_wins():
    tracker = DuplicateTracker()
    assert tracker.register(_row("Widget")) is None
    assert "name" in tracker.register(_row("Widget"))


def test_barcode_collision():
    tracker = DuplicateTracker()
    assert tracker.register(_row("Widget", "750100")) is None
    assert "barcode" in tracker.register(_row("Gadget", "750100"))


def test_barcode_message_wins_when_both_collide():
    tracker = DuplicateTracker()
    tracker.register(_row("Widget", "750100"))
    assert "barcode" in tracker.register(_row("Widget", "750100"))


def test_rows_without_barcode_do_not_collide_on_barcode():
    tracker = DuplicateTracker()
    assert tracker.register(_row("Widget")) is None
    assert tracker.register(_row("Gadget")) is None
    assert len(tracker) == 2


def test_rejected_row_registers_nothing():
    tracker = DuplicateTracker()
    tracker.register(_row("Widget", "1"))
    assert tracker.register(_row("Gadget", "1")) is not None
    # "Gadget" was never recorded, so it is still free
    assert tracker.register(_row("Gadget")) is None
