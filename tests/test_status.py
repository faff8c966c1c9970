from __future__ import annotations

import itertools

from rfkillctl.core.model import Block, HardBlockReasons
from rfkillctl.core.status import BlockStatus

_REASONS = [
    None,
    HardBlockReasons(0),
    HardBlockReasons.SIGNAL,
    HardBlockReasons.SIGNAL | HardBlockReasons.NOT_OWNER,
]


def test_no_block_is_unblocked() -> None:
    status = BlockStatus.from_soft_and_hard(False, None)
    assert status == BlockStatus.UNBLOCKED
    assert status.unblocked
    assert status.block is None
    assert not status.blocked
    assert str(status) == "unblocked"


def test_from_block_collapses_empty_block() -> None:
    assert BlockStatus.from_block(Block(soft=False)) == BlockStatus.UNBLOCKED


def test_every_other_combination_is_blocked_and_round_trips() -> None:
    for soft, reasons in itertools.product((False, True), _REASONS):
        if not soft and reasons is None:
            continue
        status = BlockStatus.from_soft_and_hard(soft, reasons)
        assert not status.unblocked
        assert status.blocked
        assert status.soft_blocked is soft
        assert status.hard_block_reasons == reasons
        assert status.hard_blocked is (reasons is not None)
        assert status.as_tuple() == (soft, reasons)


def test_invariants_hold_for_all_combinations() -> None:
    for soft, reasons in itertools.product((False, True), _REASONS):
        status = BlockStatus.from_soft_and_hard(soft, reasons)
        assert status.blocked == (status.soft_blocked or status.hard_blocked)
        if not status.hard_blocked:
            assert status.hard_block_reasons is None


def test_str_lists_block_sources() -> None:
    status = BlockStatus.from_soft_and_hard(True, HardBlockReasons.SIGNAL)
    assert str(status) == "blocked: soft hard(signal)"
    assert str(BlockStatus.from_soft_and_hard(False, HardBlockReasons(0))) == "blocked: hard(unknown)"
