"""
Unit tests for the in-memory quiz session store: atomic events and idle eviction.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from studybuddy.services.quiz_session import (
    Active,
    Configuring,
    InvalidTransitionError,
    NextQuestion,
    QuestionsLoaded,
    QuizQuestion,
    SelectAnswer,
)
from studybuddy.services.quiz_store import QuizSessionStore

QUESTIONS = tuple(
    QuizQuestion(question=f"Q{i}?", options=("a", "b", "c", "d"), correct_answer=0)
    for i in range(3)
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestEvents:
    def test_failed_transition_keeps_state(self):
        store = QuizSessionStore(ttl=0)
        sid = store.create()
        store.apply(sid, QuestionsLoaded(QUESTIONS))

        with pytest.raises(InvalidTransitionError):
            store.apply(sid, QuestionsLoaded(QUESTIONS))

        assert isinstance(store.get(sid), Active)

    def test_unknown_session(self):
        with pytest.raises(KeyError):
            QuizSessionStore(ttl=0).apply("quiz_nope", NextQuestion())

    def test_only_one_of_two_racing_loads_wins(self):
        store = QuizSessionStore(ttl=0)
        sid = store.create()
        start = threading.Barrier(2, timeout=10)

        def load(_):
            start.wait()
            try:
                store.apply(sid, QuestionsLoaded(QUESTIONS))
                return "loaded"
            except InvalidTransitionError:
                return "conflict"

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = sorted(pool.map(load, range(2)))

        assert outcomes == ["conflict", "loaded"]

    def test_concurrent_events_are_not_lost(self):
        store = QuizSessionStore(ttl=0)
        sid = store.create()
        store.apply(sid, QuestionsLoaded(QUESTIONS * 100))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: store.apply(sid, NextQuestion()), range(200)))

        assert store.get(sid).current_index == 200


class TestEviction:
    def test_idle_session_expires(self, clock):
        store = QuizSessionStore(ttl=60, clock=clock)
        sid = store.create()

        clock.now += 61

        assert store.get(sid) is None
        assert sid not in store
        with pytest.raises(KeyError):
            store.apply(sid, NextQuestion())

    def test_activity_keeps_session_alive(self, clock):
        store = QuizSessionStore(ttl=60, clock=clock)
        sid = store.create()
        store.apply(sid, QuestionsLoaded(QUESTIONS))

        for _ in range(5):
            clock.now += 50
            store.apply(sid, SelectAnswer(1))

        assert isinstance(store.get(sid), Active)

    def test_create_sweeps_abandoned_sessions(self, clock):
        store = QuizSessionStore(ttl=60, clock=clock)
        old = [store.create() for _ in range(3)]
        clock.now += 61

        fresh = store.create()

        assert len(store) == 1
        assert fresh in store
        assert not any(sid in store for sid in old)

    def test_zero_ttl_never_expires(self, clock):
        store = QuizSessionStore(ttl=0, clock=clock)
        sid = store.create()

        clock.now += 10 ** 9

        assert isinstance(store.get(sid), Configuring)
