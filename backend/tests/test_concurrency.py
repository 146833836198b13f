import threading

from conftest import add_player, make_bank
from truenorth import db
from truenorth.services.trivia.errors import DuplicateAnswer
from truenorth.services.trivia.records import LeaderboardEntry

DEVICE = '44444444-4444-4444-8444-444444444444'


def run_together(fns):
    """Start every callable at the same moment; collect results or exceptions."""
    barrier = threading.Barrier(len(fns))
    outcomes = [None] * len(fns)

    def runner(i, fn):
        barrier.wait()
        try:
            outcomes[i] = fn()
        except Exception as exc:
            outcomes[i] = exc

    threads = [threading.Thread(target=runner, args=(i, fn)) for i, fn in enumerate(fns)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return outcomes


def label_of(store, qid):
    return store.get_question(qid).label


def test_concurrent_duplicate_answer_records_exactly_once(engine, store):
    player = add_player(store, 'p1', device_id=DEVICE)
    start = engine.sessions.start(player, DEVICE)
    card = start.deck[0]
    guess = label_of(store, card.id)

    outcomes = run_together([
        lambda: engine.sessions.submit_answer(start.session_id, card.id, 100, guess)
        for _ in range(8)
    ])
    successes = [o for o in outcomes if not isinstance(o, Exception)]
    rejections = [o for o in outcomes if isinstance(o, DuplicateAnswer)]
    assert len(successes) == 1
    assert len(rejections) == 7
    assert store.count_answers(start.session_id) == 1
    assert store.get_session(start.session_id).score == successes[0].running_score


def test_concurrent_distinct_answers_keep_order_and_score(engine, store):
    player = add_player(store, 'p1', device_id=DEVICE)
    start = engine.sessions.start(player, DEVICE)
    cards = start.deck[:10]

    outcomes = run_together([
        (lambda c=c: engine.sessions.submit_answer(start.session_id, c.id, 6000, label_of(store, c.id)))
        for c in cards
    ])
    assert not any(isinstance(o, Exception) for o in outcomes)
    answers = store.answers_for_session(start.session_id)
    assert sorted(a.order_index for a in answers) == list(range(10))
    # all correct, so streaks 1..10 were handed out once each
    assert sorted(o.streak for o in outcomes) == list(range(1, 11))
    assert store.get_session(start.session_id).score == sum(o.points_awarded for o in outcomes)


def test_concurrent_finishes_produce_gapless_ranks(engine, store):
    sessions = []
    for i in range(12):
        device = f'55555555-5555-4555-8555-{i:012d}'
        player = add_player(store, f'p{i}', device_id=device)
        start = engine.sessions.start(player, device)
        if i % 3:
            card = start.deck[0]
            engine.sessions.submit_answer(start.session_id, card.id, 1000 * i, label_of(store, card.id))
        sessions.append(start.session_id)

    outcomes = run_together([(lambda s=s: engine.sessions.finish(s)) for s in sessions])
    assert not any(isinstance(o, Exception) for o in outcomes)
    entries = store.entries_for_day(outcomes[0].day)
    assert sorted(e.rank for e in entries) == list(range(1, 13))


def test_concurrent_start_on_one_device_opens_one_session(engine, store):
    player = add_player(store, 'p1', device_id=DEVICE)
    outcomes = run_together([lambda: engine.sessions.start(player, DEVICE) for _ in range(6)])
    assert not any(isinstance(o, Exception) for o in outcomes)
    assert len({o.session_id for o in outcomes}) == 1
    assert sum(1 for s in store.sessions.values() if s.is_open) == 1


def test_remove_session_waits_for_a_finish_in_flight(engine, store, clock):
    assert engine.sessions._locks is engine.leaderboard._locks
    others = []
    for i in range(2):
        device = f'66666666-6666-4666-8666-{i:012d}'
        start = engine.sessions.start(add_player(store, f'o{i}', device_id=device), device)
        others.append(start.session_id)
        engine.sessions.finish(start.session_id)

    player = add_player(store, 'p1', device_id=DEVICE)
    sid = engine.sessions.start(player, DEVICE).session_id
    board = engine.leaderboard
    done = threading.Event()

    def remove():
        board.remove_session(sid)
        done.set()

    remover = threading.Thread(target=remove)
    with board.session_lock(sid):
        remover.start()
        assert not done.wait(0.2)
        # the finish commits its entry while the removal is queued
        day = board.day_bucket()
        with board.bucket_lock(day):
            with store.transaction():
                store.close_session(sid, clock.now, 0)
                board.record(LeaderboardEntry(
                    day=day, session_id=sid, player_id=player,
                    score=999, duration_ms=0, finished_at=clock.now,
                ))
    remover.join(timeout=10)

    assert done.is_set()
    assert store.get_session(sid) is None
    entries = store.entries_for_day(board.day_bucket())
    assert sorted(e.session_id for e in entries) == sorted(others)
    assert sorted(e.rank for e in entries) == [1, 2]


def in_app(flask_app, fn):
    def call():
        with flask_app.app_context():
            return fn()
    return call


def test_sql_concurrent_duplicate_answer_records_exactly_once(file_app):
    engine = file_app.extensions['truenorth']
    store = engine.store
    make_bank(store)
    player = engine.players.register('Ann', DEVICE)
    start = engine.sessions.start(player, DEVICE)
    card = start.deck[0]
    guess = label_of(store, card.id)

    outcomes = run_together([
        in_app(file_app, lambda: engine.sessions.submit_answer(start.session_id, card.id, 100, guess))
        for _ in range(6)
    ])
    successes = [o for o in outcomes if not isinstance(o, Exception)]
    rejections = [o for o in outcomes if isinstance(o, DuplicateAnswer)]
    assert len(successes) == 1
    assert len(rejections) == 5

    db.session.expire_all()
    assert store.count_answers(start.session_id) == 1
    assert store.get_session(start.session_id).score == successes[0].running_score


def test_sql_concurrent_finishes_produce_gapless_ranks(file_app):
    engine = file_app.extensions['truenorth']
    store = engine.store
    make_bank(store)
    sessions = []
    for i in range(6):
        device = f'77777777-7777-4777-8777-{i:012d}'
        start = engine.sessions.start(engine.players.register(f'p{i}', device), device)
        if i % 2:
            card = start.deck[0]
            engine.sessions.submit_answer(start.session_id, card.id, 500 * i, label_of(store, card.id))
        sessions.append(start.session_id)

    outcomes = run_together([in_app(file_app, (lambda s=s: engine.sessions.finish(s))) for s in sessions])
    assert not any(isinstance(o, Exception) for o in outcomes)

    db.session.expire_all()
    entries = store.entries_for_day(outcomes[0].day)
    assert sorted(e.session_id for e in entries) == sorted(sessions)
    assert sorted(e.rank for e in entries) == list(range(1, 7))
