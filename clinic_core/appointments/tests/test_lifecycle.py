import itertools

import pytest

from clinic_core.appointments.lifecycle import (
    AppointmentStatus,
    InvalidStatusTransition,
    check_cancellation,
    check_transition,
)

TERMINAL = ["completed", "cancelled", "no_show"]
EARLIER = ["scheduled", "confirmed", "in_progress"]
ALL = [s.value for s in AppointmentStatus]


@pytest.mark.parametrize("current, target", list(itertools.product(TERMINAL, EARLIER)))
def test_terminal_states_cannot_be_reopened(current, target):
    with pytest.raises(InvalidStatusTransition) as exc:
        check_transition(current, target)
    assert exc.value.from_status == current
    assert exc.value.to_status == target
    assert exc.value.status_code == 403
    assert f"'{current}'" in str(exc.value.detail)


@pytest.mark.parametrize(
    "current, target",
    [
        (c, t)
        for c, t in itertools.product(ALL, ALL)
        if not (c in TERMINAL and t in EARLIER)
    ],
)
def test_every_other_pair_is_allowed(current, target):
    check_transition(current, target)


def test_enum_members_behave_like_their_values():
    with pytest.raises(InvalidStatusTransition):
        check_transition(AppointmentStatus.COMPLETED, AppointmentStatus.CONFIRMED)
    check_transition(AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED)


@pytest.mark.parametrize("current", ["scheduled", "confirmed"])
def test_cancellation_allowed_from_scheduled_or_confirmed(current):
    check_cancellation(current)


@pytest.mark.parametrize("current", ["in_progress", "completed", "cancelled", "no_show"])
def test_cancellation_rejected_elsewhere(current):
    with pytest.raises(InvalidStatusTransition) as exc:
        check_cancellation(current)
    assert exc.value.to_status == "cancelled"
