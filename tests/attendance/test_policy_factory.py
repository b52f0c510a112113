from event_attendance.attendance.factory import ScanPolicyFactory
from event_attendance.attendance.policies.time_in_policy import TimeInPolicy
from event_attendance.attendance.policies.time_out_policy import TimeOutPolicy
from event_attendance.core.enums import ScanType, SessionStatus


def test_factory_picks_time_in_policy():
    policy = ScanPolicyFactory().for_scan_type(ScanType.TIME_IN)

    assert isinstance(policy, TimeInPolicy)
    assert policy.scan_type == ScanType.TIME_IN


def test_factory_picks_time_out_policy():
    policy = ScanPolicyFactory().for_scan_type(ScanType.TIME_OUT)

    assert isinstance(policy, TimeOutPolicy)
    assert policy.scan_type == ScanType.TIME_OUT


def test_each_policy_permits_only_its_open_window():
    time_in = TimeInPolicy()
    time_out = TimeOutPolicy()

    for status in SessionStatus:
        assert time_in.permits(status) == (status == SessionStatus.ACTIVE_TIME_IN)
        assert time_out.permits(status) == (status == SessionStatus.ACTIVE_TIME_OUT)
