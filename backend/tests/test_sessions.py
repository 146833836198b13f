from collections import Counter

import pytest

from conftest import add_player
from truenorth.services.trivia.errors import (
    DuplicateAnswer,
    InsufficientContent,
    PlayerNotFound,
    QuestionNotFound,
    SessionNotFound,
    ValidationError,
)

PLAYER = '11111111-1111-4111-8111-111111111111'
DEVICE = '22222222-2222-4222-8222-222222222222'


def wrong(label):
    return 'USA' if label == 'CAN' else 'CAN'


@pytest.fixture()
def player(store):
    return add_player(store, PLAYER, device_id=DEVICE)


def answer(engine, store, session_id, card, correct=True, latency=0):
    label = store.get_question(card.id).label
    guess = label if correct else wrong(label)
    return engine.sessions.submit_answer(session_id, card.id, latency, guess)


def test_start_creates_open_session_with_balanced_deck(engine, store, player, clock):
    result = engine.sessions.start(player, DEVICE)
    assert not result.resumed
    session = store.get_session(result.session_id)
    assert session.is_open
    assert session.score == 0
    assert session.start_time == clock.now
    assert session.question_count == 20
    labels = Counter(store.get_question(card.id).label for card in result.deck)
    assert labels == {'CAN': 10, 'USA': 10}


def test_start_unknown_player(engine):
    with pytest.raises(PlayerNotFound):
        engine.sessions.start('99999999-9999-4999-8999-999999999999', DEVICE)


def test_start_twice_before_answering_returns_same_session(engine, store, player):
    first = engine.sessions.start(player, DEVICE)
    second = engine.sessions.start(player, DEVICE)
    assert second.session_id == first.session_id
    assert second.resumed
    assert len(second.deck) == 20
    assert len(store.sessions) == 1


def test_start_after_answering_abandons_stale_session(engine, store, player, clock, notifier):
    first = engine.sessions.start(player, DEVICE)
    answer(engine, store, first.session_id, first.deck[0])
    clock.advance(5000)

    second = engine.sessions.start(player, DEVICE)
    assert second.session_id != first.session_id
    stale = store.get_session(first.session_id)
    assert stale.end_time == clock.now
    assert stale.duration_ms == 5000
    # abandoned sessions never rank
    assert store.entry_for_session(first.session_id) is None
    assert notifier.published == []
    assert store.open_session_for_device(DEVICE).id == second.session_id


def test_start_with_thin_bank_leaves_stale_session_open(engine, store, player):
    first = engine.sessions.start(player, DEVICE)
    answer(engine, store, first.session_id, first.deck[0])
    for qid in ['can0', 'can1', 'can2']:
        store.set_question_active(qid, False)
    with pytest.raises(InsufficientContent):
        engine.sessions.start(player, DEVICE)
    assert store.get_session(first.session_id).is_open


def test_answer_flow_scores_and_resets_streak(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    sid = start.session_id

    first = answer(engine, store, sid, start.deck[0], correct=True, latency=0)
    assert first.correct
    assert first.points_awarded == 160
    assert first.streak == 1
    assert first.running_score == 160
    q0 = store.get_question(start.deck[0].id)
    assert first.true_label == q0.label
    assert first.explanation == q0.explanation

    second = answer(engine, store, sid, start.deck[1], correct=False, latency=100)
    assert not second.correct
    assert second.points_awarded == 0
    assert second.streak == 0
    assert second.running_score == 160

    third = answer(engine, store, sid, start.deck[2], correct=True, latency=6000)
    assert third.points_awarded == 110
    assert third.streak == 1
    assert store.get_session(sid).score == 270


def test_answer_order_index_is_contiguous(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    for card in start.deck[:5]:
        answer(engine, store, start.session_id, card)
    answers = store.answers_for_session(start.session_id)
    assert [a.order_index for a in answers] == [4, 3, 2, 1, 0]
    assert [a.question_id for a in reversed(answers)] == [c.id for c in start.deck[:5]]


def test_streak_bonus_saturates_after_five(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    results = [answer(engine, store, start.session_id, card, latency=6000) for card in start.deck[:8]]
    assert [r.streak for r in results] == [1, 2, 3, 4, 5, 6, 7, 8]
    assert [r.breakdown.streak_bonus for r in results] == [10, 20, 30, 40, 50, 50, 50, 50]
    assert [r.points_awarded for r in results][5:] == [150, 150, 150]


def test_duplicate_answer_rejected(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    answer(engine, store, start.session_id, start.deck[0])
    with pytest.raises(DuplicateAnswer):
        answer(engine, store, start.session_id, start.deck[0])
    assert store.count_answers(start.session_id) == 1


def test_answer_unknown_question(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    with pytest.raises(QuestionNotFound):
        engine.sessions.submit_answer(start.session_id, 'nope', 10, 'CAN')


def test_answer_unknown_or_finished_session(engine, store, player):
    with pytest.raises(SessionNotFound):
        engine.sessions.submit_answer('missing', 'can0', 10, 'CAN')
    start = engine.sessions.start(player, DEVICE)
    engine.sessions.finish(start.session_id)
    with pytest.raises(SessionNotFound):
        answer(engine, store, start.session_id, start.deck[0])


@pytest.mark.parametrize('latency, guess', [(-1, 'CAN'), (60001, 'CAN'), (10, 'MEX'), (True, 'CAN')])
def test_answer_validation(engine, store, player, latency, guess):
    start = engine.sessions.start(player, DEVICE)
    with pytest.raises(ValidationError):
        engine.sessions.submit_answer(start.session_id, start.deck[0].id, latency, guess)


def test_failed_write_leaves_no_partial_answer(engine, store, player, monkeypatch):
    start = engine.sessions.start(player, DEVICE)

    def broken(session_id, pts):
        raise RuntimeError('disk full')

    monkeypatch.setattr(store, 'increment_score', broken)
    with pytest.raises(RuntimeError):
        answer(engine, store, start.session_id, start.deck[0])
    assert store.count_answers(start.session_id) == 0
    assert store.get_session(start.session_id).score == 0


def test_finish_records_entry_and_notifies(engine, store, player, clock, notifier):
    start = engine.sessions.start(player, DEVICE)
    sid = start.session_id
    answer(engine, store, sid, start.deck[0], correct=True, latency=0)
    answer(engine, store, sid, start.deck[1], correct=False)
    clock.advance(45000)

    result = engine.sessions.finish(sid)
    assert result.score == 160
    assert result.duration_ms == 45000
    assert result.rank == 1
    assert result.day == '2025-10-09'
    assert '160' in result.share_text
    assert result.to_dict() == {
        'score': 160,
        'durationMs': 45000,
        'rank': 1,
        'shareText': result.share_text,
    }

    session = store.get_session(sid)
    assert not session.is_open
    assert session.duration_ms == 45000
    entry = store.entry_for_session(sid)
    assert (entry.day, entry.score, entry.duration_ms, entry.rank) == ('2025-10-09', 160, 45000, 1)
    assert notifier.count() == 1


def test_finish_twice_fails(engine, store, player):
    start = engine.sessions.start(player, DEVICE)
    engine.sessions.finish(start.session_id)
    with pytest.raises(SessionNotFound):
        engine.sessions.finish(start.session_id)


def test_failed_finish_rolls_back_everything(engine, store, player, monkeypatch, notifier):
    start = engine.sessions.start(player, DEVICE)

    def broken(day, ranks):
        raise RuntimeError('lost connection')

    monkeypatch.setattr(store, 'set_ranks', broken)
    with pytest.raises(RuntimeError):
        engine.sessions.finish(start.session_id)
    assert store.get_session(start.session_id).is_open
    assert store.entry_for_session(start.session_id) is None
    assert notifier.published == []


def test_player_registry_reuses_device_player(engine, store):
    device = '33333333-3333-4333-8333-333333333333'
    first = engine.players.register('Bob', device)
    second = engine.players.register('Bobby', device)
    assert first == second
    assert store.get_player(first).nickname == 'Bobby'
    with pytest.raises(ValidationError):
        engine.players.register('   ', device)


def test_admin_listing_carries_session_start_time(engine, store, player, clock):
    start = engine.sessions.start(player, DEVICE)
    started_at = clock.now
    clock.advance(20000)
    engine.sessions.finish(start.session_id)

    rows = engine.leaderboard.admin_listing(200)
    assert [r.session_id for r in rows] == [start.session_id]
    assert rows[0].to_dict()['startTime'] == started_at
    assert rows[0].to_dict()['date'] == '2025-10-09'
