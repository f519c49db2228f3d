from datetime import datetime

from salesops.domain.selection import RECESS_LOOKAHEAD, is_eligible, rank_leads, select_next_lead
from salesops.domain.types import LeadSnapshot, RecessConfig
from salesops.models import LeadStatus

OFF = RecessConfig(enabled=False)
ON = RecessConfig(enabled=True)


def _snap(id, **kw):
    kw.setdefault("status", LeadStatus.NOVO)
    return LeadSnapshot(id=id, **kw)


def test_ranking_attempts_then_priority_then_never_contacted():
    leads = [
        _snap(1, attempts=1, priority_score=100),
        _snap(2, attempts=0, priority_score=1, last_contact_at=datetime(2026, 1, 1)),
        _snap(3, attempts=0, priority_score=1),
        _snap(4, attempts=0, priority_score=5),
    ]
    assert [l.id for l in rank_leads(leads, agent_id=1)] == [4, 3, 2, 1]


def test_oldest_contact_first():
    leads = [
        _snap(1, last_contact_at=datetime(2026, 3, 1)),
        _snap(2, last_contact_at=datetime(2026, 1, 1)),
    ]
    assert select_next_lead(leads, agent_id=1, recess=OFF, calls_today={}).id == 2


def test_three_attempts_excluded():
    assert not is_eligible(_snap(1, attempts=3), agent_id=1)
    assert is_eligible(_snap(1, attempts=2), agent_id=1)


def test_closed_and_flagged_leads_excluded():
    for status in (
        LeadStatus.VENDIDO,
        LeadStatus.PERDIDO,
        LeadStatus.OPTOUT,
        LeadStatus.NUMERO_INVALIDO,
        LeadStatus.POSSIVEL_DUPLICADO,
    ):
        assert not is_eligible(_snap(1, status=status), agent_id=1)
    assert not is_eligible(_snap(1, possible_duplicate=True), agent_id=1)


def test_owned_by_someone_else_excluded():
    leads = [_snap(1, assigned_to_id=9, priority_score=50), _snap(2)]
    assert select_next_lead(leads, agent_id=1, recess=OFF, calls_today={}).id == 2
    assert select_next_lead(leads, agent_id=9, recess=OFF, calls_today={}).id == 1


def test_empty_queue():
    assert select_next_lead([], agent_id=1, recess=ON, calls_today={}) is None


def test_recess_off_ignores_calls_today():
    leads = [_snap(1, priority_score=10), _snap(2)]
    assert select_next_lead(leads, agent_id=1, recess=OFF, calls_today={1: 4}).id == 1


def test_recess_skips_lead_called_today():
    leads = [_snap(1, priority_score=10), _snap(2, priority_score=5), _snap(3)]
    pick = select_next_lead(leads, agent_id=1, recess=ON, calls_today={1: 1, 2: 1})
    assert pick.id == 3


def test_recess_lookahead_is_bounded():
    # top + RECESS_LOOKAHEAD candidates all called today; the one after is not looked at
    n = RECESS_LOOKAHEAD + 2
    leads = [_snap(i, priority_score=100 - i) for i in range(1, n + 1)]
    called = {i: 1 for i in range(1, n)}
    assert select_next_lead(leads, agent_id=1, recess=ON, calls_today=called) is None

    called.pop(RECESS_LOOKAHEAD + 1)
    assert select_next_lead(leads, agent_id=1, recess=ON, calls_today=called).id == RECESS_LOOKAHEAD + 1
