"""Fitbit operations exposed through the gateway."""
from gateway.errors import MalformedResponseError
from gateway.session import GatewaySession
from settings import OAuth1Credentials


class FitbitClient:
    """Client for the Fitbit choreos."""

    GET_TIME_SERIES_BY_PERIOD = "Library/Fitbit/GetTimeSeriesByPeriod"

    def __init__(self, session: GatewaySession, credentials: OAuth1Credentials):
        self.session = session
        self.credentials = credentials

    def get_steps_today(self) -> str:
        """Return the XML time series for today's step count."""
        outputs = self.session.execute(self.GET_TIME_SERIES_BY_PERIOD, {
            'ConsumerKey': self.credentials.consumer_key,
            'ConsumerSecret': self.credentials.consumer_secret,
            'AccessToken': self.credentials.access_token,
            'AccessTokenSecret': self.credentials.access_token_secret,
            'EndDate': 'today',
            'Period': '1d',
            'ResourcePath': 'activities/steps',
        })
        response = outputs.get('Response')
        if not response:
            raise MalformedResponseError(
                "No Response output for step time series",
                choreo=self.GET_TIME_SERIES_BY_PERIOD
            )
        return response
