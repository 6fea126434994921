"""Last.fm operations exposed through the gateway."""
from gateway.errors import MalformedResponseError
from gateway.session import GatewaySession


class LastFmClient:
    """Client for the Last.fm choreos."""

    GET_EVENTS = "Library/LastFm/Artist/GetEvents"

    def __init__(self, session: GatewaySession, api_key: str):
        self.session = session
        self.api_key = api_key

    def get_artist_events(self, artist: str) -> str:
        """
        Fetch every upcoming event for an artist, across all cities.

        Args:
            artist: Artist or band name

        Returns:
            Raw XML payload from Last.fm
        """
        outputs = self.session.execute(self.GET_EVENTS, {
            'APIKey': self.api_key,
            'Artist': artist,
        })
        response = outputs.get('Response')
        if not response:
            raise MalformedResponseError(
                f"No Response output for artist '{artist}'", choreo=self.GET_EVENTS
            )
        return response
