"""Google Calendar and Google Docs operations exposed through the gateway."""
from dataclasses import dataclass
from typing import Dict, Optional

from gateway.errors import MalformedResponseError
from gateway.session import GatewaySession
from settings import GoogleCredentials, GoogleDocsCredentials


@dataclass
class CreateEventRequest:
    """Inputs for one calendar event creation."""
    calendar_id: str
    title: str
    location: str
    description: str
    start_date: str
    start_time: str
    end_date: str
    end_time: str


class GoogleCalendarClient:
    """Client for the Google Calendar choreos."""

    SEARCH_CALENDARS_BY_NAME = "Library/Google/Calendar/SearchCalendarsByName"
    CREATE_EVENT = "Library/Google/Calendar/CreateEvent"

    def __init__(self, session: GatewaySession, credentials: GoogleCredentials):
        self.session = session
        self.credentials = credentials

    def search_calendar_by_name(self, name: str) -> Optional[str]:
        """
        Look up a calendar identifier by its display name.

        Args:
            name: Calendar display name

        Returns:
            Calendar identifier, or None if no calendar has that name
        """
        outputs = self.session.execute(self.SEARCH_CALENDARS_BY_NAME, {
            'ClientID': self.credentials.client_id,
            'ClientSecret': self.credentials.client_secret,
            'AccessToken': self.credentials.access_token,
            'RefreshToken': self.credentials.refresh_token,
            'CalendarName': name,
        })
        calendar_id = (outputs.get('CalendarId') or '').strip()
        return calendar_id or None

    def create_event(self, request: CreateEventRequest) -> Dict[str, str]:
        """
        Create a single calendar event.

        Args:
            request: Event fields and destination calendar

        Returns:
            Choreo outputs (the created event payload)
        """
        return self.session.execute(self.CREATE_EVENT, {
            'ClientID': self.credentials.client_id,
            'ClientSecret': self.credentials.client_secret,
            'RefreshToken': self.credentials.refresh_token,
            'CalendarID': request.calendar_id,
            'EventTitle': request.title,
            'EventLocation': request.location,
            'EventDescription': request.description,
            'StartDate': request.start_date,
            'StartTime': request.start_time,
            'EndDate': request.end_date,
            'EndTime': request.end_time,
        })


class GoogleDocsClient:
    """Client for the Google Documents and Spreadsheets choreos."""

    GET_ALL_DOCUMENTS = "Library/Google/Documents/GetAllDocuments"
    DOWNLOAD_DOCUMENT = "Library/Google/Documents/DownloadBase64EncodedDocument"
    DOWNLOAD_SPREADSHEET = "Library/Google/Spreadsheets/DownloadBase64EncodedSpreadsheet"

    def __init__(self, session: GatewaySession, credentials: GoogleDocsCredentials):
        self.session = session
        self.credentials = credentials

    def get_all_documents(self) -> str:
        """Return the Atom feed listing every non-deleted document."""
        outputs = self.session.execute(self.GET_ALL_DOCUMENTS, {
            'Username': self.credentials.username,
            'Password': self.credentials.password,
            'Deleted': 'false',
        })
        response = outputs.get('Response')
        if not response:
            raise MalformedResponseError(
                "No Response output for document list", choreo=self.GET_ALL_DOCUMENTS
            )
        return response

    def download_document(self, link: str, file_format: str) -> str:
        """
        Download a text document as Base64.

        Args:
            link: Content link from the document feed
            file_format: Export format ("doc" or "pdf")

        Returns:
            Base64 encoded file contents
        """
        inputs = self._download_inputs(link)
        inputs['Format'] = file_format
        return self._download(self.DOWNLOAD_DOCUMENT, inputs)

    def download_spreadsheet(self, link: str) -> str:
        """Download a spreadsheet as Base64."""
        return self._download(self.DOWNLOAD_SPREADSHEET, self._download_inputs(link))

    def _download_inputs(self, link: str) -> Dict[str, str]:
        return {
            'Link': link,
            'Username': self.credentials.username,
            'Password': self.credentials.password,
            'Title': '',
        }

    def _download(self, choreo: str, inputs: Dict[str, str]) -> str:
        outputs = self.session.execute(choreo, inputs)
        if 'FileContents' not in outputs:
            raise MalformedResponseError(
                f"No FileContents output for {inputs['Link']}", choreo=choreo
            )
        return outputs['FileContents']
