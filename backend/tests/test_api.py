import json


def _strict_json(res):
    def _reject(token):
        raise ValueError(f"non-standard JSON token {token}")

    return json.loads(res.get_data(as_text=True), parse_constant=_reject)


def _create(client, host='Alice', room_name=None):
    body = {'hostName': host}
    if room_name is not None:
        body['roomName'] = room_name
    res = client.post('/api/rooms', json=body)
    assert res.status_code == 201
    return res.get_json()


def _join(client, code, name):
    res = client.post(f'/api/rooms/{code}/join', json={'playerName': name})
    assert res.status_code == 200
    return res.get_json()['player']


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'


def test_create_room(client):
    data = _create(client, 'Alice')
    code = data['roomCode']
    assert data['room']['roomName'] == "Alice's Room"
    assert data['room']['gameState'] == 'waiting'
    assert data['joinUrl'] == f'http://testserver/join/{code}'


def test_create_room_requires_host(client):
    res = client.post('/api/rooms', json={'hostName': '   '})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'invalid_payload'


def test_get_unknown_room(client):
    res = client.get('/api/rooms/ZZZZZZ')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'room_not_found'


def test_join_is_idempotent_and_case_insensitive(client):
    code = _create(client)['roomCode']
    first = _join(client, code.lower(), 'Bob')
    second = _join(client, code, 'Bob')
    assert first['id'] == second['id']
    room = client.get(f'/api/rooms/{code}').get_json()['room']
    assert [p['name'] for p in room['players']] == ['Bob']


def test_full_game_flow(client):
    code = _create(client)['roomCode']
    a = _join(client, code, 'A')
    b = _join(client, code, 'B')
    c = _join(client, code, 'C')

    res = client.post(f'/api/rooms/{code}/next', json={'category': 'sports_numbers'})
    assert res.status_code == 200
    room = res.get_json()['room']
    assert room['gameState'] == 'playing'
    assert room['timer'] == 30
    assert room['questionStartTime']
    assert room['currentQuestion']['question'] == 'How many players on a soccer team on the field?'
    assert 'answer' not in room['currentQuestion']

    late = client.post(f'/api/rooms/{code}/join', json={'playerName': 'D'})
    assert late.status_code == 409
    assert late.get_json()['error'] == 'game_in_progress'

    for player, guess in ((a, '10'), (b, 11), (c, '30')):
        res = client.post(f'/api/rooms/{code}/answer', json={'playerId': player['id'], 'answer': guess})
        assert res.status_code == 200

    room = client.post(f'/api/rooms/{code}/reveal').get_json()['room']
    assert room['gameState'] == 'revealed'
    assert room['currentQuestion']['answer'] == 11
    players = {p['name']: p for p in room['players']}
    assert players['B']['closestCount'] == 1
    assert players['C']['farthestCount'] == 1
    assert room['categoryChooser'] == c['id']

    denied = client.post(f'/api/rooms/{code}/select-category', json={'playerId': a['id'], 'category': 'space_numbers'})
    assert denied.status_code == 403
    assert denied.get_json()['error'] == 'not_category_chooser'

    res = client.post(f'/api/rooms/{code}/select-category', json={'playerId': c['id'], 'category': 'space_numbers'})
    assert res.status_code == 200
    room = res.get_json()['room']
    assert room['gameState'] == 'playing'
    assert room['categoryChooser'] is None
    assert room['roundNumber'] == 2
    assert all(p['hasAnswered'] is False for p in room['players'])


def test_reveal_twice_keeps_counts(client):
    code = _create(client)['roomCode']
    a = _join(client, code, 'A')
    client.post(f'/api/rooms/{code}/start', json={})
    client.post(f'/api/rooms/{code}/answer', json={'playerId': a['id'], 'answer': 5})
    client.post(f'/api/rooms/{code}/reveal')
    room = client.post(f'/api/rooms/{code}/reveal').get_json()['room']
    assert room['players'][0]['closestCount'] == 1


def test_ready_next(client):
    code = _create(client)['roomCode']
    a = _join(client, code, 'A')
    b = _join(client, code, 'B')
    client.post(f'/api/rooms/{code}/next', json={})
    client.post(f'/api/rooms/{code}/reveal')

    data = client.post(f'/api/rooms/{code}/ready-next', json={'playerId': a['id']}).get_json()
    assert data['allPlayersReady'] is False
    assert data['readyCount'] == 1
    assert data['totalPlayers'] == 2
    data = client.post(f'/api/rooms/{code}/ready-next', json={'playerId': a['id']}).get_json()
    assert data['readyCount'] == 1
    data = client.post(f'/api/rooms/{code}/ready-next', json={'playerId': b['id']}).get_json()
    assert data['allPlayersReady'] is True


def test_unknown_player(client):
    code = _create(client)['roomCode']
    res = client.post(f'/api/rooms/{code}/answer', json={'playerId': 'ghost', 'answer': 1})
    assert res.status_code == 404
    assert res.get_json()['error'] == 'player_not_found'
    res = client.post(f'/api/rooms/{code}/ready-next', json={'playerId': 'ghost'})
    assert res.status_code == 404


def test_question_endpoint_uses_samples_offline(client):
    res = client.post('/api/question', json={'category': 'time_dates', 'usedQuestions': [{'question': 'Old?'}, 'junk']})
    assert res.status_code == 200
    data = res.get_json()
    assert data == {
        'question': 'What year did the iPhone launch?',
        'answer': 2007,
        'unit': '',
        'category': 'time_dates',
        'source': 'https://www.apple.com/stevejobs/',
    }


def test_categories(client):
    data = client.get('/api/categories').get_json()
    assert 'celebrity_age' in data['categories']
    assert len(data['categories']) == 8


def test_overflowing_answer_keeps_responses_valid_json(client):
    code = _create(client)['roomCode']
    a = _join(client, code, 'A')
    b = _join(client, code, 'B')
    client.post(f'/api/rooms/{code}/next', json={'category': 'sports_numbers'})

    res = client.post(f'/api/rooms/{code}/answer', json={'playerId': a['id'], 'answer': '1e999'})
    assert _strict_json(res)['player']['currentAnswer'] is None
    client.post(f'/api/rooms/{code}/answer', json={'playerId': b['id'], 'answer': '11'})

    room = _strict_json(client.post(f'/api/rooms/{code}/reveal'))['room']
    players = {p['name']: p for p in room['players']}
    assert players['A']['currentAnswer'] is None
    assert players['A']['hasAnswered'] is True
    assert players['A']['closestCount'] == 0
    assert players['B']['closestCount'] == 1
    assert room['categoryChooser'] == b['id']
    assert _strict_json(client.get(f'/api/rooms/{code}'))['room']['gameState'] == 'revealed'
