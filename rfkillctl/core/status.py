"""Normalized block status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from rfkillctl.core.model import Block, HardBlockReasons


@dataclass(frozen=True)
class BlockStatus:
    """Either unblocked or blocked by a :class:`Block`.

    A block that is neither soft nor hard collapses to the unblocked status,
    so ``block`` is ``None`` exactly when nothing blocks the radio.
    """

    block: Block | None = None

    UNBLOCKED: ClassVar[BlockStatus]

    def __post_init__(self) -> None:
        if self.block is not None and not self.block.soft and not self.block.hard:
            object.__setattr__(self, "block", None)

    @classmethod
    def from_block(cls, block: Block) -> BlockStatus:
        return cls(block)

    @classmethod
    def from_soft_and_hard(cls, soft: bool, hard: HardBlockReasons | None) -> BlockStatus:
        return cls(Block(soft=soft, hard_block_reasons=hard))

    def as_tuple(self) -> tuple[bool, HardBlockReasons | None]:
        if self.block is None:
            return False, None
        return self.block.soft, self.block.hard_block_reasons

    @property
    def unblocked(self) -> bool:
        return self.block is None

    @property
    def soft_blocked(self) -> bool:
        return self.as_tuple()[0]

    @property
    def hard_block_reasons(self) -> HardBlockReasons | None:
        return self.as_tuple()[1]

    @property
    def hard_blocked(self) -> bool:
        return self.hard_block_reasons is not None

    @property
    def blocked(self) -> bool:
        soft, hard = self.as_tuple()
        return soft or hard is not None

    def __str__(self) -> str:
        if self.block is None:
            return "unblocked"
        parts = []
        if self.soft_blocked:
            parts.append("soft")
        if self.hard_blocked:
            reasons = ",".join(self.hard_block_reasons.labels()) or "unknown"
            parts.append(f"hard({reasons})")
        return "blocked: " + " ".join(parts)


BlockStatus.UNBLOCKED = BlockStatus()
