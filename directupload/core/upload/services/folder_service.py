"""
Target folder service.

Makes sure the repository folder exists before files are uploaded into it.
"""
import posixpath
from typing import Mapping, Optional
from urllib.parse import urlencode, urlparse

from ..protocols import HttpTransportProtocol
from ...exceptions import FolderCreationError, TransportError
from ...logging import get_logger


class FolderCreator:
    """
    Creates the target folder in the repository if it does not exist.

    Responsibilities:
    - Check the folder with a GET on <url>.0.json
    - Create it as a sling:Folder otherwise
    """

    def __init__(self, transport: HttpTransportProtocol):
        self._transport = transport
        self._logger = get_logger('directupload.upload.folder')

    async def ensure_folder(
        self,
        folder_url: str,
        headers: Optional[Mapping[str, str]] = None
    ) -> bool:
        """
        Create the folder unless it already exists.

        Args:
            folder_url: Absolute URL of the folder
            headers: Request headers

        Returns:
            True if the folder was created, False if it already existed

        Raises:
            FolderCreationError: If the folder cannot be created
        """
        target_folder = urlparse(folder_url).path
        headers = dict(headers or {})

        try:
            await self._transport.request('GET', f"{folder_url}.0.json", headers=headers)
            self._logger.info(f"Target folder '{target_folder}' exists")
            return False
        except TransportError:
            self._logger.info(f"Target folder '{target_folder}' does not exist, create it")

        name = posixpath.basename(target_folder.rstrip('/'))
        try:
            await self._transport.request(
                'POST',
                folder_url,
                headers={**headers, 'Content-Type': 'application/x-www-form-urlencoded'},
                data=urlencode({
                    './jcr:content/jcr:title': name,
                    ':name': name,
                    './jcr:primaryType': 'sling:Folder',
                    './jcr:content/jcr:primaryType': 'nt:unstructured',
                    '_charset_': 'UTF-8',
                })
            )
        except TransportError as e:
            raise FolderCreationError(
                f"Unable to create target folder '{target_folder}': {e}",
                status=e.status,
                url=folder_url
            ) from e

        self._logger.info(f"Target folder '{target_folder}' is created")
        return True
