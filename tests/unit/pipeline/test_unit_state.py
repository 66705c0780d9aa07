# tests/unit/pipeline/test_unit_state.py - v1
"""Tests for pipeline/state.py: allowed and forbidden transitions."""

from __future__ import annotations

import pytest

from scgen.pipeline.state import GenerationRun, GenerationState, IllegalTransition

S = GenerationState


def _walk(*states: GenerationState) -> GenerationRun:
    run = GenerationRun()
    for state in states:
        run.advance(state)
    return run


class TestGenerationRun:
    def test_full_path(self):
        run = _walk(S.NORMALIZING, S.CACHE_CHECK, S.GENERATING, S.VALIDATING, S.CACHING, S.DONE)
        assert run.terminal
        assert run.history == [
            S.PENDING, S.NORMALIZING, S.CACHE_CHECK, S.GENERATING, S.VALIDATING, S.CACHING,
        ]

    def test_cache_hit_path(self):
        assert _walk(S.NORMALIZING, S.CACHE_CHECK, S.DONE).state is S.DONE

    def test_cache_disabled_path(self):
        run = _walk(S.NORMALIZING, S.GENERATING, S.VALIDATING, S.DONE)
        assert S.CACHE_CHECK not in run.history

    def test_failed_only_from_normalizing(self):
        assert _walk(S.NORMALIZING, S.FAILED).terminal
        run = _walk(S.NORMALIZING, S.GENERATING)
        with pytest.raises(IllegalTransition):
            run.advance(S.FAILED)

    @pytest.mark.parametrize(
        "path",
        [
            (S.GENERATING,),
            (S.NORMALIZING, S.DONE),
            (S.NORMALIZING, S.CACHE_CHECK, S.CACHING),
            (S.NORMALIZING, S.GENERATING, S.DONE),
        ],
    )
    def test_illegal(self, path):
        with pytest.raises(IllegalTransition):
            _walk(*path)

    def test_terminal_states_are_final(self):
        run = _walk(S.NORMALIZING, S.CACHE_CHECK, S.DONE)
        with pytest.raises(IllegalTransition, match="done -> generating"):
            run.advance(S.GENERATING)

    def test_request_id_and_elapsed(self):
        run = GenerationRun()
        assert len(run.request_id) == 12
        assert run.elapsed_ms >= 0
        assert not run.terminal
