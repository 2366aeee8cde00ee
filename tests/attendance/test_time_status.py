from datetime import datetime

from src.mediguard.mediguard.attendance.factory import AttendanceStrategyFactory
from src.mediguard.mediguard.attendance.strategies.base import DeadlinePolicy
from src.mediguard.mediguard.attendance.strategies.early_strategy import EarlyLeaveStrategy
from src.mediguard.mediguard.attendance.strategies.late_strategy import LateStrategy
from src.mediguard.mediguard.attendance.strategies.normal_strategy import NormalStrategy
from src.mediguard.mediguard.core.enums import TimeStatus

POLICY = DeadlinePolicy()


def test_factory_checkin_on_time_until_deadline_minute():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(at=datetime(2025, 1, 6, 8, 5, 59), policy=POLICY)
    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_deadline():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(at=datetime(2025, 1, 6, 8, 6, 0), policy=POLICY)
    assert isinstance(strategy, LateStrategy)
    assert strategy.decide_checkin(at=datetime(2025, 1, 6, 8, 6), policy=POLICY).status == TimeStatus.LATE


def test_factory_checkout_early_before_five():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(at=datetime(2025, 1, 6, 16, 59), policy=POLICY)
    assert isinstance(strategy, EarlyLeaveStrategy)
    assert strategy.decide_checkout(at=datetime(2025, 1, 6, 16, 59), policy=POLICY).status == TimeStatus.EARLY


def test_factory_checkout_on_time_from_five():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(at=datetime(2025, 1, 6, 17, 0), policy=POLICY)
    assert strategy.decide_checkout(at=datetime(2025, 1, 6, 17, 0), policy=POLICY).status == TimeStatus.ON_TIME


def test_custom_policy():
    policy = DeadlinePolicy(check_in_hour=7, check_in_minute=0, check_out_hour=15)
    factory = AttendanceStrategyFactory()
    assert isinstance(factory.for_checkin(at=datetime(2025, 1, 6, 7, 1), policy=policy), LateStrategy)
    assert isinstance(factory.for_checkout(at=datetime(2025, 1, 6, 15, 0), policy=policy), NormalStrategy)
