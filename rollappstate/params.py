"""Module parameters and their validation."""

from __future__ import annotations

from dataclasses import dataclass, field

from .addresses import acc_address_from_bech32
from .model import DeployerParams

KEY_DEPLOYER_WHITELIST = b"DeployerWhitelist"
KEY_DISPUTE_PERIOD_IN_BLOCKS = b"DisputePeriodInBlocks"
DEFAULT_DISPUTE_PERIOD_IN_BLOCKS = 3
MIN_DISPUTE_PERIOD_IN_BLOCKS = 1


def validate_dispute_period_in_blocks(value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TypeError(f"invalid parameter type: {type(value).__name__}")
    if value < MIN_DISPUTE_PERIOD_IN_BLOCKS:
        raise ValueError("dispute period cannot be lower than 1 block")


def validate_deployer_whitelist(value: object) -> None:
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, DeployerParams) for item in value
    ):
        raise TypeError(f"invalid parameter type: {type(value).__name__}")
    seen: set[str] = set()
    for position, item in enumerate(value):
        try:
            acc_address_from_bech32(item.address)
        except ValueError as err:
            raise ValueError(f"deployerWhitelist[{position}] format error: {err}") from err
        if item.address in seen:
            raise ValueError("duplicated deployer address in deployerWhitelist")
        seen.add(item.address)


@dataclass
class Params:
    dispute_period_in_blocks: int = DEFAULT_DISPUTE_PERIOD_IN_BLOCKS
    deployer_whitelist: list[DeployerParams] = field(default_factory=list)

    def validate(self) -> None:
        """Raise if any parameter is invalid."""
        validate_dispute_period_in_blocks(self.dispute_period_in_blocks)
        validate_deployer_whitelist(self.deployer_whitelist)

    def __str__(self) -> str:
        lines = [f"dispute_period_in_blocks: {self.dispute_period_in_blocks}"]
        if not self.deployer_whitelist:
            lines.append("deployer_whitelist: []")
        else:
            lines.append("deployer_whitelist:")
            for deployer in self.deployer_whitelist:
                lines.append(f"- address: {deployer.address or chr(34) * 2}")
                lines.append(f"  max_rollapps: {deployer.max_rollapps}")
        return "\n".join(lines) + "\n"


def default_params() -> Params:
    return Params(DEFAULT_DISPUTE_PERIOD_IN_BLOCKS, [])