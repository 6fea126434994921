"""Event finder for an artist's shows in a given town."""
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from gateway.errors import ChoreoExecutionError, GatewayError, MalformedResponseError
from gateway.lastfm import LastFmClient
from processor.models import Event, EventSearch

logger = logging.getLogger(__name__)


class EventFinder:
    """Finds an artist's events and keeps the ones in the target town."""

    def __init__(self, lastfm: LastFmClient):
        """
        Initialize the event finder.

        Args:
            lastfm: Client used to query the artist's events
        """
        self.lastfm = lastfm

    def find_events(self, band: str, target_town: str) -> List[Event]:
        """
        Find the band's events whose venue city is the target town.

        Args:
            band: Artist or band name
            target_town: Town to match, case-insensitively and exactly

        Returns:
            Matching events in the order the source returned them
        """
        return self.search(band, target_town).events

    def search(self, band: str, target_town: str) -> EventSearch:
        """
        Query every event for the band and filter by town.

        Args:
            band: Artist or band name
            target_town: Town to match, case-insensitively and exactly

        Returns:
            EventSearch holding the source's total and the matching events

        Raises:
            ValueError: If band or target_town is blank
            GatewayError: If the lookup fails or the response is malformed
        """
        if not band or not band.strip():
            raise ValueError("band must be a non-empty string")
        if not target_town or not target_town.strip():
            raise ValueError("target_town must be a non-empty string")

        logger.info(f"Querying Last.fm for '{band}' shows in {target_town}")

        try:
            xml_content = self.lastfm.get_artist_events(band)
            search = self._parse_events(xml_content, band, target_town)
        except GatewayError as e:
            logger.error(f"Failed to look up events for artist '{band}': {e}")
            raise

        logger.info(
            f"Found {len(search.events)} '{band}' shows in {target_town} "
            f"out of {search.total_found} total"
        )
        return search

    def _parse_events(self, xml_content: str, band: str, target_town: str) -> EventSearch:
        """
        Parse the Last.fm events payload.

        Args:
            xml_content: Raw XML from the artist events lookup
            band: Artist name, used as fallback title
            target_town: Town to match

        Returns:
            EventSearch with matching events
        """
        soup = BeautifulSoup(xml_content, 'xml')

        envelope = soup.find('lfm')
        if envelope is not None and envelope.get('status') == 'failed':
            error = envelope.find('error')
            detail = error.get_text(strip=True) if error else 'unknown error'
            raise ChoreoExecutionError(
                f"Last.fm returned an error for '{band}': {detail}",
                choreo=LastFmClient.GET_EVENTS
            )

        events_element = soup.find('events')
        if events_element is None:
            raise MalformedResponseError(
                f"No events element in response for '{band}'",
                choreo=LastFmClient.GET_EVENTS
            )

        total_text = events_element.get('total', '0')
        try:
            total_found = int(total_text)
        except ValueError:
            raise MalformedResponseError(
                f"Invalid event total for '{band}': {total_text!r}",
                choreo=LastFmClient.GET_EVENTS
            )

        wanted = target_town.strip().casefold()
        events = []

        for element in events_element.find_all('event', recursive=False):
            city = _child_text(element, 'venue', 'location', 'city')
            if not city:
                logger.debug("Skipping event without a venue city")
                continue

            if city.casefold() != wanted:
                continue

            events.append(Event(
                band=band,
                title=_child_text(element, 'title') or band,
                venue=_child_text(element, 'venue', 'name') or '',
                city=city,
                start_date=_child_text(element, 'startDate'),
                description=_child_text(element, 'description')
            ))

        return EventSearch(total_found=total_found, events=events)


def _child_text(element: Tag, *path: str) -> Optional[str]:
    """Follow direct children by tag name and return stripped text, or None."""
    node = element
    for name in path:
        node = node.find(name, recursive=False)
        if node is None:
            return None
    text = node.get_text(strip=True)
    return text or None
