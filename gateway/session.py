"""Authenticated session against the choreo API gateway."""
import logging
from typing import Dict, Optional

import requests

from gateway.errors import (
    ChoreoExecutionError,
    GatewayCredentialError,
    GatewayHTTPError,
    GatewayObjectNotAccessibleError,
    GatewayTransportError,
    MalformedResponseError,
)
from settings import GatewayCredentials

logger = logging.getLogger(__name__)


class GatewaySession:
    """HTTP session used to execute choreos on the gateway."""

    BASE_URL = "https://{account}.temboolive.com/arcturus-web/api-1.0/ar/"

    def __init__(self, credentials: GatewayCredentials, timeout: int = 30):
        """
        Open a session for the given gateway account.

        Args:
            credentials: Gateway account name and application key
            timeout: Per-call HTTP timeout in seconds (default: 30)
        """
        self.credentials = credentials
        self.timeout = timeout
        self.base_url = self.BASE_URL.format(account=credentials.account_name)
        self._http = requests.Session()
        self._http.auth = (credentials.app_key_name, credentials.app_key)
        self._http.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'x-temboo-domain': f"/{credentials.account_name}/master",
        })
        logger.info(f"Initialized gateway session for account: {credentials.account_name}")

    def execute(self, choreo: str, inputs: Dict[str, str]) -> Dict[str, str]:
        """
        Run a choreo and return its named outputs.

        Args:
            choreo: Library path of the choreo (e.g. "Library/LastFm/Artist/GetEvents")
            inputs: Input set as name/value pairs

        Returns:
            Dictionary of output names to values

        Raises:
            GatewayCredentialError: If the credentials are rejected
            GatewayObjectNotAccessibleError: If the choreo cannot be found
            GatewayHTTPError: For any other non-success HTTP status
            GatewayTransportError: On network failure or timeout
            MalformedResponseError: If the response body is not valid JSON
            ChoreoExecutionError: If the choreo reports an execution error
        """
        url = self.base_url + choreo
        payload = {
            'inputs': [
                {'name': name, 'value': '' if value is None else str(value)}
                for name, value in inputs.items()
            ]
        }

        logger.debug(f"Executing choreo {choreo}")
        try:
            response = self._http.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise GatewayTransportError(
                f"Request to {choreo} failed: {e}", choreo=choreo
            ) from e

        self._check_status(response, choreo)

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Response from {choreo} is not valid JSON", choreo=choreo
            ) from e

        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"Response from {choreo} is not a JSON object", choreo=choreo
            )

        execution = body.get('execution') or {}
        if not isinstance(execution, dict):
            raise MalformedResponseError(
                f"Execution status from {choreo} is not a JSON object", choreo=choreo
            )
        if str(execution.get('status') or 'SUCCESS').upper() == 'ERROR':
            last_error = execution.get('lastError') or 'unknown error'
            raise ChoreoExecutionError(
                f"Choreo {choreo} failed: {last_error}", choreo=choreo
            )

        return body.get('output') or {}

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> 'GatewaySession':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_status(self, response: requests.Response, choreo: str) -> None:
        """
        Map a non-success HTTP status onto the gateway exception hierarchy.

        Args:
            response: HTTP response from the gateway
            choreo: Library path of the choreo, for error context
        """
        if response.ok:
            return

        detail = self._error_detail(response)
        status = response.status_code

        if status in (401, 403):
            raise GatewayCredentialError(
                f"Credentials rejected for {choreo}: {detail}", choreo=choreo
            )
        if status == 404:
            raise GatewayObjectNotAccessibleError(
                f"Resource not accessible for {choreo}: {detail}", choreo=choreo
            )
        raise GatewayHTTPError(
            f"HTTP {status} from {choreo}: {detail}",
            status_code=status,
            choreo=choreo
        )

    @staticmethod
    def _error_detail(response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return response.text.strip() or response.reason
        if isinstance(body, dict):
            return body.get('error') or body.get('message') or response.reason
        return response.reason
