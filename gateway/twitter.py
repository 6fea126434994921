"""Twitter operations exposed through the gateway."""
from typing import Dict

from gateway.session import GatewaySession
from settings import OAuth1Credentials


class TwitterClient:
    """Client for the Twitter choreos."""

    STATUSES_UPDATE = "Library/Twitter/Tweets/StatusesUpdate"

    def __init__(self, session: GatewaySession, credentials: OAuth1Credentials):
        self.session = session
        self.credentials = credentials

    def update_status(self, message: str) -> Dict[str, str]:
        """Post a status update."""
        return self.session.execute(self.STATUSES_UPDATE, {
            'ConsumerKey': self.credentials.consumer_key,
            'ConsumerSecret': self.credentials.consumer_secret,
            'AccessToken': self.credentials.access_token,
            'AccessTokenSecret': self.credentials.access_token_secret,
            'StatusUpdate': message,
        })
