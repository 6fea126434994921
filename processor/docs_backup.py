"""Backup of Google Docs files into a Dropbox folder."""
import logging
from typing import Dict, List

from bs4 import BeautifulSoup

from gateway.dropbox import DropboxClient
from gateway.errors import GatewayError, MalformedResponseError
from gateway.google import GoogleDocsClient
from processor.models import BackupResult, Document

logger = logging.getLogger(__name__)


class DocsBackup:
    """Copies every Google document into a newly created Dropbox folder."""

    def __init__(self, docs: GoogleDocsClient, dropbox: DropboxClient, folder: str):
        """
        Initialize the backup.

        Args:
            docs: Client for listing and downloading Google documents
            dropbox: Client for creating the folder and uploading files
            folder: Name of the Dropbox folder to create; must not exist yet
        """
        self.docs = docs
        self.dropbox = dropbox
        self.folder = folder

    def run(self) -> BackupResult:
        """
        Create the folder, then download and upload each document in turn.

        Returns:
            BackupResult listing the uploaded document titles
        """
        logger.info(f"Creating Dropbox folder '{self.folder}'")
        self.dropbox.create_folder(self.folder)

        documents = self.list_documents()
        logger.info(f"Backing up {len(documents)} documents")

        result = BackupResult(folder=self.folder)
        for document in documents:
            contents = self.download(document)
            self.upload(document, contents)
            result.uploaded.append(document.title)

        return result

    def list_documents(self) -> List[Document]:
        """
        Fetch the document feed and collect title and content link pairs.

        A later entry with the same title replaces the earlier link.
        """
        soup = BeautifulSoup(self.docs.get_all_documents(), 'xml')
        feed = soup.find('feed')
        if feed is None:
            raise MalformedResponseError(
                "No feed element in document list",
                choreo=GoogleDocsClient.GET_ALL_DOCUMENTS
            )

        links: Dict[str, str] = {}
        for entry in feed.find_all('entry'):
            title = entry.find('title')
            content = entry.find('content')
            if title is None or content is None or not content.get('src'):
                logger.warning("Skipping document entry without title or content link")
                continue
            links[title.get_text(strip=True)] = content['src']

        return [Document(title=title, link=link) for title, link in links.items()]

    def download(self, document: Document) -> str:
        """Download a document as Base64, choosing the export by link type."""
        if 'spreadsheet' in document.link:
            return self.docs.download_spreadsheet(document.link)

        file_format = 'pdf' if 'securesc' in document.link else 'doc'
        return self.docs.download_document(document.link, file_format)

    def upload(self, document: Document, contents: str) -> None:
        try:
            self.dropbox.upload_file(self.folder, document.title, contents)
        except GatewayError as e:
            logger.error(f"An error occurred attempting to upload {document.title}: {e}")
            raise
        logger.info(f"Uploaded {document.title}")
