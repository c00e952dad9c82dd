import pytest

STRONG = 'Tr0ub4dor&3!'


def register(client, email='dave@example.com', password=STRONG, **extra):
    return client.post('/api/auth/register', json={'email': email, 'password': password, **extra})


def login(client, email='dave@example.com', password=STRONG, ip='203.0.113.7'):
    return client.post('/api/auth/login', json={'email': email, 'password': password},
                       environ_base={'REMOTE_ADDR': ip})


@pytest.fixture
def logged_in(client):
    assert register(client).status_code == 201
    assert login(client).status_code == 200
    return client


def test_end_to_end_registration_and_lockout(client, clock):
    resp = register(client, password='abc')
    assert resp.status_code == 400
    assert 'too weak' in resp.get_json()['message']

    assert register(client).status_code == 201

    for _ in range(5):
        assert login(client, password='wrong').status_code == 401

    blocked = login(client, password='wrong')
    assert blocked.status_code == 429
    assert blocked.headers['Retry-After'] == '900'

    # correct password is still refused while the block lasts
    assert login(client).status_code == 429
    clock.advance(900)
    resp = login(client)
    assert resp.status_code == 200
    assert resp.get_json()['user']['email'] == 'dave@example.com'


def test_lockout_is_keyed_by_address(client):
    register(client)
    for _ in range(5):
        login(client, password='wrong', ip='198.51.100.1')
    assert login(client, ip='198.51.100.1').status_code == 429
    assert login(client, ip='198.51.100.2').status_code == 200


def test_malformed_login_is_rejected(client):
    resp = client.post('/api/auth/login', json={'email': 'x@example.com'})
    assert resp.status_code == 400


def test_vault_requires_session(client):
    assert client.get('/api/passwords').status_code == 401
    assert client.post('/api/passwords', json={'title': 't', 'encrypted_password': 'p'}).status_code == 401
    assert client.get('/api/password-stats').status_code == 401
    assert client.get('/api/security-alerts').status_code == 401
    assert client.get('/api/activity-logs').status_code == 401
    assert client.post('/api/generate-password', json={}).status_code == 401
    assert client.get('/api/auth/me').status_code == 401


def test_password_crud(logged_in):
    client = logged_in
    resp = client.post('/api/passwords', json={'title': 'mail', 'encrypted_password': 'abc',
                                               'username': 'dave'},
                       headers={'User-Agent': 'pytest-agent'})
    assert resp.status_code == 201
    entry = resp.get_json()
    assert entry['strength'] == 15

    resp = client.put(f"/api/passwords/{entry['id']}", json={'encrypted_password': STRONG})
    assert resp.status_code == 200
    assert resp.get_json()['strength'] == 88

    assert client.get(f"/api/passwords/{entry['id']}").get_json()['title'] == 'mail'
    assert len(client.get('/api/passwords').get_json()) == 1

    assert client.delete(f"/api/passwords/{entry['id']}").status_code == 200
    assert client.get(f"/api/passwords/{entry['id']}").status_code == 404

    logs = client.get('/api/activity-logs').get_json()
    assert [log['action'] for log in logs] == ['delete_password', 'update_password', 'create_password']
    assert logs[-1]['user_agent'] == 'pytest-agent'
    assert len(client.get('/api/activity-logs?limit=1').get_json()) == 1


def test_invalid_ids_and_bodies(logged_in):
    client = logged_in
    assert client.get('/api/passwords/abc').status_code == 400
    assert client.delete('/api/passwords/0').status_code == 400
    assert client.post('/api/passwords', json={'title': ''}).status_code == 400
    assert client.post('/api/passwords', json={'title': 't', 'encrypted_password': 'p',
                                               'strength': 100}).status_code == 400
    assert client.post('/api/passwords', data='not json').status_code == 400
    assert client.get('/api/activity-logs?limit=x').status_code == 400


def test_cross_user_access_is_not_found(client, app):
    register(client, email='eve@example.com')
    register(client)
    login(client, email='eve@example.com')
    entry = client.post('/api/passwords', json={'title': 'secret', 'encrypted_password': 'abc'}).get_json()
    alert = client.get('/api/security-alerts').get_json()[0]
    client.post('/api/auth/logout')

    login(client)
    assert client.get(f"/api/passwords/{entry['id']}").status_code == 404
    assert client.put(f"/api/passwords/{entry['id']}", json={'title': 'x'}).status_code == 404
    assert client.delete(f"/api/passwords/{entry['id']}").status_code == 404
    assert client.post(f"/api/security-alerts/{alert['id']}/resolve").status_code == 404
    assert client.get('/api/passwords').get_json() == []


def test_stats_and_alerts(logged_in):
    client = logged_in
    for title, payload in (('weak', 'abc'), ('mid', 'abcdefgh1'), ('strong', STRONG)):
        client.post('/api/passwords', json={'title': title, 'encrypted_password': payload})

    assert client.get('/api/password-stats').get_json() == {'total': 3, 'weak': 1, 'strong': 1, 'health': 33}

    alerts = client.get('/api/security-alerts?unresolved=1').get_json()
    assert len(alerts) == 1
    alert_id = alerts[0]['id']
    assert client.post(f'/api/security-alerts/{alert_id}/resolve').status_code == 200
    assert client.post(f'/api/security-alerts/{alert_id}/resolve').status_code == 404
    assert client.get('/api/security-alerts?unresolved=1').get_json() == []
    assert client.get('/api/security-alerts').get_json()[0]['resolved'] is True


def test_generate_password(logged_in):
    resp = logged_in.post('/api/generate-password', json={'length': 24, 'include_symbols': True})
    body = resp.get_json()
    assert resp.status_code == 200
    assert len(body['password']) == 24
    assert body['strength'] == 100

    assert logged_in.post('/api/generate-password', json={'length': 2}).status_code == 400
    assert logged_in.post('/api/generate-password', json={
        'include_uppercase': False, 'include_lowercase': False,
        'include_numbers': False, 'include_symbols': False}).status_code == 400


def test_me_and_logout(logged_in):
    assert logged_in.get('/api/auth/me').get_json()['user']['username'] == 'dave'
    logged_in.post('/api/auth/logout')
    assert logged_in.get('/api/auth/me').status_code == 401


def test_health(client):
    body = client.get('/api/health').get_json()
    assert body['status'] == 'ok'
