"""Unit tests for GatewaySession."""
import base64
import json

import pytest
import responses
from requests.exceptions import ConnectionError, Timeout

from gateway.errors import (
    ChoreoExecutionError,
    GatewayCredentialError,
    GatewayError,
    GatewayHTTPError,
    GatewayObjectNotAccessibleError,
    GatewayTransportError,
    MalformedResponseError,
)
from gateway.session import GatewaySession
from settings import GatewayCredentials

CHOREO = "Library/LastFm/Artist/GetEvents"
URL = f"https://acme.temboolive.com/arcturus-web/api-1.0/ar/{CHOREO}"


@pytest.fixture
def session():
    """Create a session for a test account."""
    credentials = GatewayCredentials(
        account_name='acme',
        app_key_name='myFirstApp',
        app_key='secret-key'
    )
    with GatewaySession(credentials, timeout=5) as gateway_session:
        yield gateway_session


class TestGatewaySession:
    """Test cases for GatewaySession class."""

    @responses.activate
    def test_execute_returns_outputs(self, session):
        """Test that a successful execution returns the output mapping."""
        responses.add(
            responses.POST,
            URL,
            json={
                'execution': {'status': 'SUCCESS'},
                'output': {'Response': '<lfm status="ok"/>'}
            },
            status=200
        )

        outputs = session.execute(CHOREO, {'APIKey': 'k', 'Artist': 'Spoon'})

        assert outputs == {'Response': '<lfm status="ok"/>'}

    @responses.activate
    def test_execute_sends_inputs_and_credentials(self, session):
        """Test request body, auth and domain header."""
        responses.add(responses.POST, URL, json={'output': {}}, status=200)

        session.execute(CHOREO, {'APIKey': 'k', 'Artist': 'Spoon'})

        request = responses.calls[0].request
        body = json.loads(request.body)
        assert body == {
            'inputs': [
                {'name': 'APIKey', 'value': 'k'},
                {'name': 'Artist', 'value': 'Spoon'}
            ]
        }
        expected_auth = base64.b64encode(b'myFirstApp:secret-key').decode('ascii')
        assert request.headers['Authorization'] == f"Basic {expected_auth}"
        assert request.headers['x-temboo-domain'] == '/acme/master'

    @responses.activate
    def test_execute_missing_output_returns_empty_dict(self, session):
        """Test that a response without outputs yields an empty mapping."""
        responses.add(responses.POST, URL, json={'execution': {'status': 'SUCCESS'}}, status=200)

        assert session.execute(CHOREO, {}) == {}

    @pytest.mark.parametrize('status', [401, 403])
    @responses.activate
    def test_execute_credential_error(self, session, status):
        """Test that rejected credentials raise GatewayCredentialError."""
        responses.add(responses.POST, URL, json={'error': 'bad app key'}, status=status)

        with pytest.raises(GatewayCredentialError) as exc_info:
            session.execute(CHOREO, {})

        assert 'bad app key' in str(exc_info.value)
        assert exc_info.value.choreo == CHOREO

    @responses.activate
    def test_execute_not_accessible_error(self, session):
        """Test that a 404 raises GatewayObjectNotAccessibleError."""
        responses.add(responses.POST, URL, body='Not Found', status=404)

        with pytest.raises(GatewayObjectNotAccessibleError):
            session.execute(CHOREO, {})

    @responses.activate
    def test_execute_http_error_keeps_status(self, session):
        """Test that other failures raise GatewayHTTPError with the status."""
        responses.add(responses.POST, URL, body='Server Error', status=500)

        with pytest.raises(GatewayHTTPError) as exc_info:
            session.execute(CHOREO, {})

        assert exc_info.value.status_code == 500
        assert 'Server Error' in str(exc_info.value)

    @responses.activate
    def test_execute_http_error_is_not_retried(self, session):
        """Test that a failed call is made exactly once."""
        responses.add(responses.POST, URL, body='Server Error', status=503)

        with pytest.raises(GatewayError):
            session.execute(CHOREO, {})

        assert len(responses.calls) == 1

    @responses.activate
    def test_execute_timeout(self, session):
        """Test that a timeout surfaces as a transport error."""
        responses.add(responses.POST, URL, body=Timeout("Request timed out"))

        with pytest.raises(GatewayTransportError) as exc_info:
            session.execute(CHOREO, {})

        assert isinstance(exc_info.value.__cause__, Timeout)

    @responses.activate
    def test_execute_connection_error(self, session):
        """Test that a connection failure surfaces as a transport error."""
        responses.add(responses.POST, URL, body=ConnectionError("refused"))

        with pytest.raises(GatewayTransportError):
            session.execute(CHOREO, {})

    @responses.activate
    def test_execute_invalid_json(self, session):
        """Test that a non-JSON body raises MalformedResponseError."""
        responses.add(responses.POST, URL, body='<html>oops</html>', status=200)

        with pytest.raises(MalformedResponseError):
            session.execute(CHOREO, {})

    @responses.activate
    def test_execute_choreo_error(self, session):
        """Test that an execution error raises ChoreoExecutionError."""
        responses.add(
            responses.POST,
            URL,
            json={'execution': {'status': 'ERROR', 'lastError': 'Invalid API key'}},
            status=200
        )

        with pytest.raises(ChoreoExecutionError) as exc_info:
            session.execute(CHOREO, {})

        assert 'Invalid API key' in str(exc_info.value)

    @pytest.mark.parametrize('execution', ['ERROR', ['ERROR'], 42])
    @responses.activate
    def test_execute_execution_not_an_object(self, session, execution):
        """Test that a non-object execution status raises MalformedResponseError."""
        responses.add(
            responses.POST,
            URL,
            json={'execution': execution, 'output': {}},
            status=200
        )

        with pytest.raises(MalformedResponseError):
            session.execute(CHOREO, {})
