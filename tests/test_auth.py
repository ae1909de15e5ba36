from expense_dashboard.auth import (
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    AuthSession,
    IdentityProvider,
)
from expense_dashboard.rest_client import StoreClient

from test_rest_client import FakeHttp, FakeResponse


def token_payload(access='access-1', refresh='refresh-1', expires_in=3600):
    return {
        'access_token': access,
        'refresh_token': refresh,
        'expires_in': expires_in,
        'user': {'id': 'user-1', 'email': 'ola@example.no'},
    }


class Clock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_provider(*responses, clock=None):
    http = FakeHttp(*responses)
    client = StoreClient('https://demo.example.co', 'anon-key', session=http)
    return IdentityProvider(client, clock=clock or Clock()), client, http


def test_session_from_payload_uses_expires_in():
    session = AuthSession.from_payload(token_payload(), now=100.0)
    assert session.user_id == 'user-1'
    assert session.email == 'ola@example.no'
    assert session.expires_at == 3700.0
    assert session.is_expired(3680.0) is True
    assert session.is_expired(3000.0) is False


def test_sign_in_sets_bearer_token_and_notifies():
    provider, client, http = make_provider(FakeResponse(body=token_payload()))
    events = []
    provider.on_auth_state_change(lambda event, session: events.append((event, session.user_id)))

    result = provider.sign_in_with_password('ola@example.no', 'secret')

    assert result.ok
    assert client.access_token == 'access-1'
    assert events == [(SIGNED_IN, 'user-1')]
    assert http.requests[0]['params'] == [('grant_type', 'password')]
    assert http.requests[0]['json'] == {'email': 'ola@example.no', 'password': 'secret'}


def test_failed_sign_in_keeps_signed_out():
    provider, client, _ = make_provider(
        FakeResponse(400, {'error_description': 'Invalid login credentials'}, reason='Bad Request')
    )
    result = provider.sign_in_with_password('ola@example.no', 'wrong')
    assert result.message == 'Invalid login credentials'
    assert provider.session is None
    assert client.access_token is None


def test_get_session_refreshes_expired_token():
    clock = Clock()
    provider, client, http = make_provider(
        FakeResponse(body=token_payload(expires_in=60)),
        FakeResponse(body=token_payload(access='access-2', refresh='refresh-2')),
        clock=clock,
    )
    provider.sign_in_with_password('ola@example.no', 'secret')
    events = []
    provider.on_auth_state_change(lambda event, session: events.append(event))

    clock.now += 120
    result = provider.get_session()

    assert result.data.access_token == 'access-2'
    assert client.access_token == 'access-2'
    assert events == [TOKEN_REFRESHED]
    assert http.requests[1]['json'] == {'refresh_token': 'refresh-1'}
    assert http.requests[1]['params'] == [('grant_type', 'refresh_token')]


def test_failed_refresh_signs_out():
    clock = Clock()
    provider, client, _ = make_provider(
        FakeResponse(body=token_payload(expires_in=60)),
        FakeResponse(400, {'msg': 'Invalid Refresh Token'}, reason='Bad Request'),
        clock=clock,
    )
    provider.sign_in_with_password('ola@example.no', 'secret')
    clock.now += 120

    result = provider.get_session()

    assert result.data is None
    assert result.message == 'Invalid Refresh Token'
    assert provider.session is None
    assert client.access_token is None


def test_sign_out_clears_session_even_when_remote_fails():
    provider, client, http = make_provider(
        FakeResponse(body=token_payload()),
        FakeResponse(500, None, reason='Server Error'),
    )
    provider.sign_in_with_password('ola@example.no', 'secret')
    events = []
    provider.on_auth_state_change(lambda event, session: events.append((event, session)))

    provider.sign_out()

    assert provider.session is None
    assert client.access_token is None
    assert events == [(SIGNED_OUT, None)]
    assert http.requests[1]['url'].endswith('/auth/v1/logout')
    assert http.requests[1]['headers']['Authorization'] == 'Bearer access-1'


def test_unsubscribe_stops_notifications():
    provider, _, _ = make_provider(FakeResponse(body=token_payload()))
    events = []
    subscription = provider.on_auth_state_change(lambda event, session: events.append(event))
    subscription.unsubscribe()
    provider.sign_in_with_password('ola@example.no', 'secret')
    assert events == []
