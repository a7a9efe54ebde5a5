from ledger.exceptions import GameFinishedError, InvalidScoreError, LedgerError, NotFoundError


def test_all_ledger_errors_share_a_base():
    assert issubclass(InvalidScoreError, LedgerError)
    assert issubclass(NotFoundError, LedgerError)
    assert issubclass(GameFinishedError, LedgerError)


def test_not_found_message_and_attributes():
    exc = NotFoundError("player", "p-9")

    assert str(exc) == "player 'p-9' not found"
    assert (exc.kind, exc.identifier) == ("player", "p-9")


def test_game_finished_message():
    exc = GameFinishedError("g1", "add players")

    assert str(exc) == "cannot add players: game 'g1' is already finished"
    assert exc.game_id == "g1"
