"""Tests de clasificación de slots y de la vista por nivel de detalle."""

from datetime import date, time

from agenda.models.appointment import AppointmentStatus
from agenda.services.conflicts import OccupationKind, classify
from agenda.services.ledger import OccupiedInterval
from agenda.services.policy import DetailLevel
from agenda.services.redaction import Slot, render_slot
from agenda.services.schedule_store import ExceptionBlock

DAY = date(2030, 1, 7)


def booking(start: time, minutes: int, appointment_id=1, client="Juan") -> OccupiedInterval:
    return OccupiedInterval(
        appointment_id=appointment_id,
        professional_id=1,
        date=DAY,
        start_time=start,
        total_duration_minutes=minutes,
        status=AppointmentStatus.CONFIRMADA,
        code=f"ORG001-{appointment_id:05d}",
        client_name=client,
    )


def test_free_when_nothing_booked():
    assert classify(600, 30, [], []).free


def test_touching_booking_is_free():
    occupied = [booking(time(10, 0), 60)]
    assert classify(570, 30, occupied, []).free      # 09:30-10:00
    assert classify(660, 30, occupied, []).free      # 11:00-11:30
    assert not classify(600, 30, occupied, []).free  # 10:00-10:30
    assert not classify(630, 60, occupied, []).free  # 10:30-11:30


def test_duration_longer_than_gap_is_occupied():
    # 09:30 con 60' pisa la cita de las 10:00
    result = classify(570, 60, [booking(time(10, 0), 60)], [])
    assert not result.free
    assert result.reason.kind == OccupationKind.CITA
    assert result.reason.appointment_id == 1


def test_zero_duration_booking_at_slot_edges_does_not_block():
    occupied = [booking(time(10, 0), 0)]
    assert classify(600, 30, occupied, []).free  # 10:00-10:30
    assert classify(570, 30, occupied, []).free  # 09:30-10:00


def test_zero_duration_booking_inside_slot_blocks():
    # 09:30-10:30 contiene el instante 10:00
    result = classify(570, 60, [booking(time(10, 0), 0)], [])
    assert not result.free
    assert result.reason.kind == OccupationKind.CITA


def test_whole_day_exception_blocks_everything():
    block = ExceptionBlock(exception_id=1, title="Feriado", is_org_wide=True)
    assert block.whole_day
    assert not classify(540, 30, [], [block]).free
    assert not classify(1050, 30, [], [block]).free


def test_timed_exception_partial_overlap():
    block = ExceptionBlock(exception_id=1, title="Comida", is_org_wide=False, start=780, end=840)
    assert not classify(765, 30, [], [block]).free   # 12:45-13:15
    assert classify(750, 30, [], [block]).free       # 12:30-13:00
    assert classify(840, 30, [], [block]).free       # 14:00-14:30


def test_exception_takes_precedence_over_booking():
    block = ExceptionBlock(exception_id=1, title="Vacaciones", is_org_wide=False)
    result = classify(600, 30, [booking(time(10, 0), 60)], [block])
    assert result.reason.kind == OccupationKind.BLOQUEO
    assert result.reason.title == "Vacaciones"


def _occupied_slot():
    result = classify(600, 30, [booking(time(10, 0), 60, appointment_id=7, client="Lucía")], [])
    return Slot(date=DAY, start=600, duration_minutes=30, professional_id=1,
                free=result.free, reason=result.reason)


def test_render_basic_has_no_reason_nor_identity():
    out = render_slot(_occupied_slot(), DetailLevel.BASICO)
    assert out == {"hora": "10:00", "hora_fin": "10:30", "duracion_minutos": 30, "disponible": False}


def test_render_full_has_generic_reason():
    out = render_slot(_occupied_slot(), DetailLevel.COMPLETO)
    assert out["razon"] == "Cita existente"
    assert "cita_id" not in out
    assert "cliente_nombre" not in out


def test_render_admin_has_identity():
    out = render_slot(_occupied_slot(), DetailLevel.ADMIN)
    assert out["cita_id"] == 7
    assert out["cliente_nombre"] == "Lucía"
    assert out["razon"] == "Cita ORG001-00007 - Lucía"


def test_render_exception_reason_by_level():
    block = ExceptionBlock(exception_id=1, title="Feriado", is_org_wide=True)
    result = classify(600, 30, [], [block])
    slot = Slot(date=DAY, start=600, duration_minutes=30, professional_id=1,
                free=False, reason=result.reason)
    assert render_slot(slot, DetailLevel.COMPLETO)["razon"] == "Feriado"
    assert render_slot(slot, DetailLevel.ADMIN)["razon"] == "Bloqueo organizacional: Feriado"
    assert "cita_id" not in render_slot(slot, DetailLevel.ADMIN)
