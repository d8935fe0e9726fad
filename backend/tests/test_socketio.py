def _events(sio_client, name):
    return [pkt['args'][0] for pkt in sio_client.get_received() if pkt['name'] == name]


def test_watch_unknown_room(sio_client):
    ack = sio_client.emit('room:watch', {'roomCode': 'NOPE00'}, callback=True)
    assert ack == {'ok': False, 'error': 'room_not_found'}
    errors = _events(sio_client, 'room:error')
    assert errors and errors[0]['error'] == 'room_not_found'


def test_watch_receives_state_and_broadcasts(client, sio_client):
    code = client.post('/api/rooms', json={'hostName': 'Host'}).get_json()['roomCode']

    ack = sio_client.emit('room:watch', {'roomCode': code.lower()}, callback=True)
    assert ack['ok'] is True
    assert ack['room']['code'] == code
    sio_client.get_received()

    client.post(f'/api/rooms/{code}/join', json={'playerName': 'Zed'})
    states = _events(sio_client, 'room:state')
    assert states
    assert [p['name'] for p in states[-1]['players']] == ['Zed']


def test_sync_and_unwatch(client, sio_client):
    code = client.post('/api/rooms', json={'hostName': 'Host'}).get_json()['roomCode']
    sio_client.emit('room:watch', {'roomCode': code}, callback=True)
    ack = sio_client.emit('room:sync', {'roomCode': code}, callback=True)
    assert ack['room']['gameState'] == 'waiting'

    assert sio_client.emit('room:unwatch', {'roomCode': code}, callback=True) == {'ok': True}
    sio_client.get_received()
    client.post(f'/api/rooms/{code}/join', json={'playerName': 'Zed'})
    assert _events(sio_client, 'room:state') == []


def test_non_dict_payloads_are_rejected(sio_client):
    ack = sio_client.emit('room:watch', 'ABCDEF', callback=True)
    assert ack == {'ok': False, 'error': 'room_not_found'}
    errors = _events(sio_client, 'room:error')
    assert errors and errors[0]['error'] == 'invalid_room'

    assert sio_client.emit('room:sync', ['x'], callback=True) == {'ok': False, 'error': 'room_not_found'}
    assert sio_client.emit('room:unwatch', 'ABCDEF', callback=True) == {'ok': False, 'error': 'invalid_room'}
