# app/api/auth/test_auth_routes.py
"""
세션 교환/토큰 재발급/프로필 API 테스트

사용법: python -m pytest app/api/auth/test_auth_routes.py -v
"""


def test_session_exchange_creates_profile(client, store):
    response = client.post('/api/auth/session', json={"id_token": "alice-token"})
    assert response.status_code == 200

    body = response.get_json()
    assert body['access_token'] and body['refresh_token']
    assert body['user'] == {
        "user_id": "alice",
        "display_name": "Alice",
        "avatar_url": "https://img.example/alice.png",
        "email": "alice@example.com",
    }
    profile = store.get("users/alice").to_dict()
    assert profile['uid'] == "alice"
    assert profile['displayName'] == "Alice"
    assert profile['photoURL'] == "https://img.example/alice.png"


def test_session_rejects_invalid_token(client):
    response = client.post('/api/auth/session', json={"id_token": "forged"})
    assert response.status_code == 401
    assert response.get_json()['error_code'] == "INVALID_ID_TOKEN"

    response = client.post('/api/auth/session', json={})
    assert response.status_code == 400


def test_refresh_and_me(client):
    tokens = client.post('/api/auth/session', json={"id_token": "bob-token"}).get_json()

    response = client.post('/api/auth/token/refresh',
                           headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert response.status_code == 200
    access_token = response.get_json()['access_token']

    me = client.get('/api/auth/me', headers={"Authorization": f"Bearer {access_token}"}).get_json()
    assert me['user_id'] == "bob"
    assert me['display_name'] == "Bob"


def test_public_profile_and_update(client, auth_headers):
    headers = auth_headers("alice-token")
    client.post('/api/posts', json={"title": "Alpha Launch"}, headers=headers)

    profile = client.get('/api/users/alice').get_json()
    assert profile['display_name'] == "Alice"
    assert profile['post_count'] == 1
    assert 'email' not in profile

    response = client.patch('/api/users/me/profile', json={"username": " alice_w "}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['username'] == "alice_w"

    assert client.get('/api/users/nobody').status_code == 404
