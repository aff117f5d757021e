"""Domain models returned by the chain client — pure dataclasses, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime

from src.rk_common.coins import Coin


class ChainClientError(Exception):
    """Any failure talking to the node. The message is the node's own text."""


class UnknownAddressError(ChainClientError):
    pass


class NoBlockResultsError(ChainClientError):
    def __init__(self, height: int, message: str) -> None:
        self.height = height
        super().__init__(message)


class BlockUnavailableError(ChainClientError):
    """The requested block is above the tip, pruned, or unknown."""


@dataclass(frozen=True)
class Event:
    type: str
    attributes: tuple[tuple[str, str], ...] = ()

    def attribute_map(self) -> dict[str, str]:
        # later duplicates win, matching how the node renders flattened events
        return {key: value for key, value in self.attributes}


@dataclass(frozen=True)
class MessageLog:
    msg_index: int
    events: tuple[Event, ...] = ()


@dataclass(frozen=True)
class Delegation:
    validator_address: str
    balance: Coin


@dataclass(frozen=True)
class UnbondingDelegation:
    validator_address: str
    entry_balances: tuple[int, ...] = ()


@dataclass(frozen=True)
class BlockHeader:
    height: int
    time: datetime
    last_block_hash: str = ""


@dataclass(frozen=True)
class Block:
    hash: str                      # uppercase hex
    header: BlockHeader
    txs: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class TxResult:
    code: int = 0
    codespace: str = ""
    log: str = ""
    events: tuple[Event, ...] = ()
    gas_wanted: int = 0
    gas_used: int = 0

    @property
    def ok(self) -> bool:
        return self.code == 0


@dataclass(frozen=True)
class BlockResults:
    height: int
    txs_results: tuple[TxResult, ...] = ()
    begin_block_events: tuple[Event, ...] = ()
    end_block_events: tuple[Event, ...] = ()


@dataclass(frozen=True)
class BroadcastResult:
    code: int
    log: str
    hash: str


@dataclass(frozen=True)
class Peer:
    node_id: str
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class NodeStatus:
    latest_height: int
    earliest_height: int
    earliest_hash: str
    catching_up: bool
    peers: tuple[Peer, ...] = ()
