"""Tests for rk_common.enums — values are part of the wire contract."""

from src.rk_common.enums import (
    CurveType,
    EventType,
    Mode,
    OperationStatus,
    OperationType,
    SignatureType,
    SubAccount,
)


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_str_values(self) -> None:
        for enum_cls in (CurveType, EventType, Mode, OperationStatus, OperationType, SignatureType, SubAccount):
            for member in enum_cls:
                assert isinstance(member, str)
                assert member == member.value


class TestWireValues:
    def test_operation_types(self) -> None:
        assert {t.value for t in OperationType} == {"fee", "transfer", "mint", "burn"}

    def test_statuses(self) -> None:
        assert {s.value for s in OperationStatus} == {"success", "failure"}

    def test_sub_accounts(self) -> None:
        assert {s.value for s in SubAccount} == {
            "liquid",
            "liquid_delegated",
            "liquid_unbonding",
            "vesting",
            "vesting_delegated",
            "vesting_unbonding",
        }

    def test_modes(self) -> None:
        assert Mode("online") is Mode.ONLINE
        assert Mode("offline") is Mode.OFFLINE
