import pytest

from votebracket.exceptions import InvalidPayload
from votebracket.messages import (
    CastVote, CheckRoom, CreateRoom, Disconnect, InstantWin, JoinRoom,
    ResetGame, StartGame, UpdateName, parse_event,
)


def test_create_room_accepts_bare_name_or_object():
    assert parse_event('createRoom', 'Host') == CreateRoom('Host')
    assert parse_event('createRoom', {'name': 'Host'}) == CreateRoom('Host')


def test_join_room_trims_code():
    assert parse_event('joinRoom', {'code': ' 1234 ', 'name': 'Sam'}) == JoinRoom('1234', 'Sam')


def test_join_room_without_code_gives_empty_code():
    assert parse_event('joinRoom', {'name': 'Sam'}) == JoinRoom('', 'Sam')


def test_check_room():
    assert parse_event('checkRoom', '1234') == CheckRoom('1234')


def test_update_name_requires_name():
    assert parse_event('updateName', {'name': 'Boss'}) == UpdateName('Boss')
    with pytest.raises(InvalidPayload):
        parse_event('updateName', {})


def test_start_game():
    message = parse_event('startGame', {
        'participants': ['A', 'B'],
        'matches': [{'id': 1}],
        'adminParticipates': True,
    })
    assert message == StartGame(['A', 'B'], [{'id': 1}], True)


def test_start_game_defaults():
    assert parse_event('startGame', {'matches': []}) == StartGame([], [], False)


def test_start_game_requires_match_list():
    with pytest.raises(InvalidPayload):
        parse_event('startGame', {'matches': 'lots'})
    with pytest.raises(InvalidPayload):
        parse_event('startGame', None)


def test_vote_and_instant_win():
    assert parse_event('vote', {'matchId': 3, 'playerNum': 1}) == CastVote(3, 1)
    assert parse_event('instantWin', {'matchId': 'm1', 'playerNum': 2}) == InstantWin('m1', 2)


def test_vote_requires_match_and_slot():
    with pytest.raises(InvalidPayload):
        parse_event('vote', {'playerNum': 1})
    with pytest.raises(InvalidPayload):
        parse_event('vote', {'matchId': 1, 'playerNum': 'one'})


def test_payloadless_events():
    assert parse_event('resetGame') == ResetGame()
    assert parse_event('disconnect') == Disconnect()


def test_unknown_event():
    with pytest.raises(InvalidPayload):
        parse_event('launchMissiles', {})
