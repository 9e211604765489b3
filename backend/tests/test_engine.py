import pytest

from sketchparty.game.errors import StateConflict
from sketchparty.game.masking import revealed_count
from sketchparty.game.models import Difficulty, RoundPhase
from sketchparty.game.words import is_catalog_word


def _draw(engine, session, sid, n):
    for i in range(n):
        engine.relay_draw_event(session, sid, {"type": "draw", "x": 100 + i, "y": 200, "color": "#000", "lineWidth": 4})


def _start(engine, session, word="cat", rounds=3):
    assert engine.start_game(session, "alice-sid", rounds)
    assert engine.choose_word(session, "alice-sid", word)


def test_start_game_prepares_round_one(engine, notifier, two_player_session):
    session = two_player_session
    assert engine.start_game(session, "alice-sid", 3)

    assert session.phase is RoundPhase.AWAITING_WORD_CHOICE
    assert session.current_round == 1
    assert session.drawer.id == "alice-sid"
    assert notifier.names()[:3] == ["gameStarted", "scoresUpdate", "roundPreparing"]
    assert notifier.events("roundPreparing")[0] == {"round": 1, "maxRounds": 3, "drawerName": "Alice"}

    offer = notifier.events("chooseWord", to="alice-sid")[0]
    assert len(offer["options"]) == 3
    assert len(set(offer["options"])) == 3


def test_only_host_can_start(engine, two_player_session):
    assert not engine.start_game(two_player_session, "bob-sid", 3)
    assert two_player_session.phase is RoundPhase.IDLE


def test_minimum_players_is_enforced(engine, store, monkeypatch):
    session = store.create_session("alice-sid", "Alice")
    monkeypatch.setattr(engine.config, "MIN_PLAYERS", 2)
    with pytest.raises(StateConflict):
        engine.start_game(session, "alice-sid", 3)


@pytest.mark.parametrize("raw, expected", [(None, 3), ("abc", 3), (0, 3), (-2, 3), ("5", 5), (99, 20)])
def test_max_rounds_is_sanitized(engine, raw, expected):
    assert engine.sanitize_rounds(raw) == expected


def test_word_choice_is_ignored_out_of_turn(engine, two_player_session):
    session = two_player_session
    engine.start_game(session, "alice-sid", 3)

    assert not engine.choose_word(session, "bob-sid", "cat")
    assert not engine.choose_word(session, "alice-sid", "   ")
    assert not engine.choose_word(session, "alice-sid", None)
    assert session.phase is RoundPhase.AWAITING_WORD_CHOICE

    assert engine.choose_word(session, "alice-sid", "Cat")
    assert not engine.choose_word(session, "alice-sid", "dog")
    assert session.current_word == "cat"


def test_active_round_fixes_word_and_mask(engine, notifier, scheduler, two_player_session):
    session = two_player_session
    _start(engine, session)

    view = session.round_view()
    assert view.active
    assert view.secret_word == "cat"
    assert view.mask == "___"
    assert view.time_remaining == 180
    assert notifier.events("yourWord", to="alice-sid") == [{"word": "cat"}]
    assert notifier.events("roundInfo")[-1]["maskedWord"] == "___"
    assert session.round_timer in [t.handle for t in scheduler.pending(repeat=True)]


def test_cat_round_scenario(engine, notifier, two_player_session):
    session = two_player_session
    assert session.code == "ABCD"
    _start(engine, session)

    for _ in range(60):
        engine.tick(session)
    assert session.time_left == 120
    assert revealed_count(session.masked_word) == 1

    for _ in range(60):
        engine.tick(session)
    assert session.time_left == 60
    assert revealed_count(session.masked_word) == 2
    assert [h["maskedWord"] for h in notifier.events("hintUpdate")][-1] == session.masked_word
    assert len(notifier.events("hintUpdate")) == 2

    assert engine.submit_guess(session, "bob-sid", " CAT ")

    ended = notifier.events("roundEnded")
    assert len(ended) == 1
    assert ended[0]["reason"] == "allGuessed"
    assert ended[0]["correctGuessers"] == ["Bob"]
    assert ended[0]["word"] == "cat"
    assert session.player("bob-sid").score == 10
    assert session.player("alice-sid").score == 5
    assert session.phase is RoundPhase.ENDED
    assert session.current_word is None and session.masked_word is None


def test_round_times_out(engine, notifier, scheduler, two_player_session):
    session = two_player_session
    _start(engine, session)

    for _ in range(180):
        engine.tick(session)

    ended = notifier.events("roundEnded")
    assert [e["reason"] for e in ended] == ["timeUp"]
    assert session.time_left == 0
    assert session.round_timer is None
    assert len(scheduler.pending(repeat=False)) == 1

    engine.tick(session)
    assert len(notifier.events("timerUpdate")) == 180


def test_drawer_cannot_guess_own_word(engine, notifier, two_player_session):
    session = two_player_session
    _start(engine, session)
    notifier.clear()

    assert not engine.submit_guess(session, "alice-sid", "cat")
    assert "alice-sid" not in session.correct_guessers
    assert notifier.events("chatMessage", to="ABCD") == []
    assert notifier.events("chatMessage", to="alice-sid")[0]["type"] == "system"
    assert session.player("alice-sid").score == 0


def test_wrong_guesses_are_echoed_and_do_not_score(engine, notifier, two_player_session):
    session = two_player_session
    _start(engine, session)
    notifier.clear()

    assert not engine.submit_guess(session, "bob-sid", "dog")
    assert not engine.submit_guess(session, "bob-sid", "   ")
    assert not engine.submit_guess(session, "stranger", "cat")
    assert notifier.events("chatMessage") == [{"name": "Bob", "text": "dog", "type": "chat"}]
    assert [p.score for p in session.players] == [0, 0]


def test_correct_guess_scores_once(engine, store, notifier, two_player_session):
    session = two_player_session
    store.join_session("ABCD", "carol-sid", "Carol")
    _start(engine, session)

    assert engine.submit_guess(session, "bob-sid", "cat")
    assert not engine.submit_guess(session, "bob-sid", "cat")
    assert session.active
    assert session.player("bob-sid").score == 10
    assert session.player("alice-sid").score == 5

    assert engine.submit_guess(session, "carol-sid", "cat")
    assert session.player("alice-sid").score == 10
    assert notifier.events("roundEnded")[0]["reason"] == "allGuessed"


def test_drawer_rotates_and_game_over_fires_once(engine, notifier, scheduler, two_player_session):
    session = two_player_session
    engine.start_game(session, "alice-sid", 3)
    drawers = []

    for round_no in (1, 2, 3):
        drawer = session.drawer
        drawers.append(drawer.name)
        guesser = next(p for p in session.players if p.id != drawer.id)
        assert engine.choose_word(session, drawer.id, "sun")
        assert engine.submit_guess(session, guesser.id, "sun")
        assert session.current_round == round_no
        assert scheduler.run_delayed() == 1

    assert drawers == ["Alice", "Bob", "Alice"]
    assert session.phase is RoundPhase.GAME_OVER
    assert scheduler.run_delayed() == 0

    over = notifier.events("gameOver")
    assert len(over) == 1
    assert len(over[0]["history"]) == 3
    assert over[0]["history"][1] == {"round": 2, "word": "sun", "drawerName": "Bob", "correctGuessers": ["Alice"]}
    assert {s["name"]: s["score"] for s in over[0]["scores"]} == {"Alice": 20, "Bob": 25}


def test_restart_after_game_over_resets(engine, notifier, scheduler, two_player_session):
    session = two_player_session
    _start(engine, session, rounds=1)
    engine.submit_guess(session, "bob-sid", "cat")
    scheduler.run_delayed()
    assert session.phase is RoundPhase.GAME_OVER

    assert engine.start_game(session, "alice-sid", 2)
    assert session.current_round == 1
    assert session.history == []
    assert [p.score for p in session.players] == [0, 0]
    assert session.drawer.id == "alice-sid"


def test_cooldown_after_teardown_is_noop(engine, store, notifier, scheduler, two_player_session):
    session = two_player_session
    _start(engine, session)
    engine.submit_guess(session, "bob-sid", "cat")
    cooldown = session.cooldown_timer

    store.remove_player(session, "bob-sid")
    store.remove_player(session, "alice-sid")
    assert cooldown.cancelled

    engine.advance_after_cooldown(session)
    assert notifier.events("roundPreparing")[-1]["round"] == 1


def test_drawer_leaving_ends_round(engine, store, notifier, two_player_session):
    session = two_player_session
    store.join_session("ABCD", "carol-sid", "Carol")
    _start(engine, session)

    removal = store.remove_player(session, "alice-sid")
    engine.handle_departure(session, removal)

    ended = notifier.events("roundEnded")[-1]
    assert ended["reason"] == "drawerLeft"
    assert ended["drawerName"] == "Alice"
    assert session.host_id == "bob-sid"


def test_drawer_leaving_during_word_choice_is_recorded(engine, store, notifier, scheduler, two_player_session):
    session = two_player_session
    store.join_session("ABCD", "carol-sid", "Carol")
    engine.start_game(session, "alice-sid", 1)
    assert session.phase is RoundPhase.AWAITING_WORD_CHOICE

    engine.handle_departure(session, store.remove_player(session, "alice-sid"))

    assert notifier.events("roundEnded") == [
        {"round": 1, "word": "", "drawerName": "Alice", "correctGuessers": [], "reason": "drawerLeft"}
    ]
    assert session.phase is RoundPhase.ENDED
    assert not engine.choose_word(session, "bob-sid", "cat")

    assert scheduler.run_delayed() == 1
    over = notifier.events("gameOver")
    assert len(over) == 1
    assert len(over[0]["history"]) == 1


def test_first_seat_drawer_leaving_passes_turn_onward(engine, store, scheduler, two_player_session):
    session = two_player_session
    store.join_session("ABCD", "carol-sid", "Carol")
    _start(engine, session)

    engine.handle_departure(session, store.remove_player(session, "alice-sid"))
    assert session.drawer_index == 0

    scheduler.run_delayed()
    assert session.current_round == 2
    assert session.drawer.id == "carol-sid"


def test_last_guesser_leaving_completes_round(engine, store, notifier, two_player_session):
    session = two_player_session
    store.join_session("ABCD", "carol-sid", "Carol")
    _start(engine, session)
    engine.submit_guess(session, "bob-sid", "cat")

    engine.handle_departure(session, store.remove_player(session, "carol-sid"))
    assert notifier.events("roundEnded")[-1]["reason"] == "allGuessed"


def test_late_joiner_gets_current_round(engine, store, notifier, two_player_session):
    session = two_player_session
    _start(engine, session)
    engine.tick(session)

    store.join_session("ABCD", "carol-sid", "Carol")
    engine.announce_join(session, session.player("carol-sid"))

    assert notifier.events("roundInfo", to="carol-sid")[0]["maskedWord"] == "___"
    assert notifier.events("timerUpdate", to="carol-sid") == [{"timeLeft": 179}]


def test_draw_events_from_drawer_are_relayed_and_sampled(engine, notifier, two_player_session):
    session = two_player_session
    _start(engine, session)
    notifier.clear()

    assert engine.relay_draw_event(session, "alice-sid", {"type": "penDown"})
    assert engine.relay_draw_event(session, "alice-sid", {"type": "draw", "x": 1, "y": 2, "color": "#f00", "lineWidth": 3})
    assert not engine.relay_draw_event(session, "bob-sid", {"type": "draw", "x": 1, "y": 2})
    assert not engine.relay_draw_event(session, "alice-sid", {"type": "draw", "x": "left"})
    assert not engine.relay_draw_event(session, "alice-sid", "garbage")

    relayed = [(p, skip) for (e, p, _, skip) in notifier.sent if e == "remoteDrawEvent"]
    assert relayed == [
        ({"type": "penDown"}, "alice-sid"),
        ({"type": "draw", "x": 1.0, "y": 2.0, "color": "#f00", "lineWidth": 3}, "alice-sid"),
    ]
    assert list(session.stroke_samples) == [(1.0, 2.0)]


def test_stroke_buffer_is_bounded(engine, two_player_session):
    session = two_player_session
    _start(engine, session)
    _draw(engine, session, "alice-sid", 1200)
    assert len(session.stroke_samples) == 1000
    assert session.stroke_samples[0] == (300.0, 200.0)


def test_repeated_clears_broadcast_once(engine, notifier, two_player_session):
    session = two_player_session
    assert engine.clear_canvas(session, "alice-sid")
    assert not engine.clear_canvas(session, "bob-sid")
    assert not engine.clear_canvas(session, "alice-sid")
    assert not engine.clear_canvas(session, "stranger")
    assert notifier.names().count("clearCanvasAll") == 1


def test_clear_during_round_is_drawer_only(engine, notifier, two_player_session):
    session = two_player_session
    _start(engine, session)
    _draw(engine, session, "alice-sid", 1)

    assert not engine.clear_canvas(session, "bob-sid")
    assert engine.clear_canvas(session, "alice-sid")


def test_synthetic_drawer_plays_back_strokes(engine, store, notifier, scheduler, two_player_session):
    session = two_player_session
    store.remove_player(session, "bob-sid")
    store.add_synthetic_player(session, "alice-sid", "easy")
    _start(engine, session)
    for _ in range(180):
        engine.tick(session)
    scheduler.run_delayed()

    assert session.drawer.is_ai
    assert session.active
    assert session.current_word
    assert notifier.events("yourWord", to=session.drawer.id) == []
    assert session.draw_timer is not None

    notifier.clear()
    total = len(session.pending_strokes)
    while engine.play_next_stroke(session):
        pass
    assert len(notifier.events("remoteDrawEvent")) == total
    assert session.draw_timer is None


def test_synthetic_drawer_playback_stops_when_round_ends(engine, store, notifier, scheduler, two_player_session):
    session = two_player_session
    store.add_synthetic_player(session, "alice-sid", "easy")
    engine.start_game(session, "alice-sid", 5)
    engine.choose_word(session, "alice-sid", "cat")
    for _ in range(180):
        engine.tick(session)
    scheduler.run_delayed()
    engine.choose_word(session, "bob-sid", "dog")
    for _ in range(180):
        engine.tick(session)
    scheduler.run_delayed()

    assert session.drawer.is_ai
    word = session.current_word
    engine.play_next_stroke(session)
    engine.submit_guess(session, "alice-sid", word)
    engine.submit_guess(session, "bob-sid", word)

    assert not session.active
    assert not engine.play_next_stroke(session)


def test_easy_ai_first_guesses_are_not_words(engine, store, notifier, two_player_session):
    session = two_player_session
    store.remove_player(session, "bob-sid")
    bot = store.add_synthetic_player(session, "alice-sid", "easy")
    _start(engine, session)
    _draw(engine, session, "alice-sid", 40)

    for _ in range(20):
        engine.tick(session)

    bot_guesses = [m["text"] for m in notifier.events("chatMessage") if m["name"] == bot.name]
    assert len(bot_guesses) == 3
    assert session.ai_guess_count == 3
    assert not any(is_catalog_word(g) for g in bot_guesses)
    assert session.ai_used_guesses == {g.lower() for g in bot_guesses}


def test_ai_waits_for_strokes(engine, store, notifier, two_player_session):
    session = two_player_session
    store.add_synthetic_player(session, "alice-sid", "hard")
    _start(engine, session)
    _draw(engine, session, "alice-sid", 39)

    for _ in range(60):
        engine.tick(session)
    assert session.ai_guess_count == 0


def test_ai_guess_cap_and_no_repeats(engine, store, notifier, two_player_session):
    session = two_player_session
    store.remove_player(session, "bob-sid")
    bot = store.add_synthetic_player(session, "alice-sid", "medium")
    # Five-letter target outside the catalog: every guess is wrong.
    _start(engine, session, word="zzzzz")
    _draw(engine, session, "alice-sid", 50)

    for _ in range(179):
        engine.tick(session)

    guesses = [m["text"] for m in notifier.events("chatMessage") if m["name"] == bot.name]
    assert session.ai_guess_count == 6
    assert len(guesses) == 6
    assert len(set(guesses)) == 6
    assert all(is_catalog_word(g) and len(g) == 5 for g in guesses)
    assert session.ai_used_guesses == set(guesses)


def test_hard_ai_that_cheats_ends_round(engine, store, notifier, two_player_session, monkeypatch):
    from sketchparty.ai import guesser as guesser_mod

    session = two_player_session
    store.remove_player(session, "bob-sid")
    bot = store.add_synthetic_player(session, "alice-sid", "hard")
    monkeypatch.setitem(guesser_mod.STRATEGIES, Difficulty.HARD, guesser_mod.HardStrategy(guesser_mod.CheatModel(1.0, 0.0, 1.0)))
    _start(engine, session, word="spaceship")
    _draw(engine, session, "alice-sid", 40)

    for _ in range(10):
        engine.tick(session)

    assert notifier.events("roundEnded")[0]["reason"] == "allGuessed"
    assert bot.score == 10
    assert session.player("alice-sid").score == 5
