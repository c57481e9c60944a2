import json


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health(client):
    assert client.get('/health').get_json() == {'status': 'healthy'}


def test_room_exists(flask_app, client):
    coordinator = flask_app.extensions['votebracket']
    room = coordinator.registry.create_room('sid-1', 'Host')
    res = client.get(f'/api/rooms/{room.code}')
    assert res.status_code == 200
    assert res.get_json() == {'code': room.code, 'exists': True}


def test_room_missing(client):
    assert client.get('/api/rooms/0000').get_json()['exists'] is False


def test_validate_bracket_ok(flask_app, tmp_path):
    path = tmp_path / 'bracket.json'
    path.write_text(json.dumps([
        {'id': 'm1', 'p1': 'A', 'p2': 'B', 'next': 'm3'},
        {'id': 'm2', 'p1': 'C', 'p2': 'D', 'next': 'm3'},
        {'id': 'm3', 'src1': 'm1', 'src2': 'm2'},
    ]))
    result = flask_app.test_cli_runner().invoke(args=['validate-bracket', str(path)])
    assert result.exit_code == 0
    assert 'OK: 3 matches, 1 final match(es)' in result.output


def test_validate_bracket_cycle(flask_app, tmp_path):
    path = tmp_path / 'bracket.json'
    path.write_text(json.dumps([{'id': 'a', 'next': 'b'}, {'id': 'b', 'next': 'a'}]))
    result = flask_app.test_cli_runner().invoke(args=['validate-bracket', str(path)])
    assert result.exit_code != 0
    assert 'Malformed bracket' in result.output


def test_validate_bracket_bad_json(flask_app, tmp_path):
    path = tmp_path / 'bracket.json'
    path.write_text('{not json')
    result = flask_app.test_cli_runner().invoke(args=['validate-bracket', str(path)])
    assert result.exit_code != 0
    assert 'Not valid JSON' in result.output
