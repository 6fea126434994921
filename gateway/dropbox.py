"""Dropbox operations exposed through the gateway."""
from typing import Dict

from gateway.session import GatewaySession
from settings import OAuth1Credentials


class DropboxClient:
    """Client for the Dropbox choreos."""

    CREATE_FOLDER = "Library/Dropbox/CreateFolder"
    UPLOAD_FILE = "Library/Dropbox/UploadFile"

    def __init__(self, session: GatewaySession, credentials: OAuth1Credentials):
        self.session = session
        self.credentials = credentials

    def create_folder(self, name: str) -> Dict[str, str]:
        """Create a folder; fails if a folder with that name already exists."""
        inputs = self._credential_inputs()
        inputs['NewFolderName'] = name
        return self.session.execute(self.CREATE_FOLDER, inputs)

    def upload_file(self, folder: str, name: str, contents: str) -> Dict[str, str]:
        """
        Upload Base64 encoded contents as a file.

        Args:
            folder: Destination folder name
            name: File name
            contents: Base64 encoded file contents
        """
        inputs = self._credential_inputs()
        inputs.update({
            'Folder': folder,
            'FileName': name,
            'FileContents': contents,
        })
        return self.session.execute(self.UPLOAD_FILE, inputs)

    def _credential_inputs(self) -> Dict[str, str]:
        return {
            'AppKey': self.credentials.consumer_key,
            'AppSecret': self.credentials.consumer_secret,
            'AccessToken': self.credentials.access_token,
            'AccessTokenSecret': self.credentials.access_token_secret,
        }
