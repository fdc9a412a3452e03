# ABOUTME: Markdown editor sessions for files shown by the marked directive.
# ABOUTME: Edits are pushed back to every directive reading the file through DataFile.

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .data_file import DataFile

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    """Application-wide switch for the edit affordance."""
    show_editors: bool = False


class EditorSession:
    """An open editor for one file."""

    def __init__(self, filename: str, content: str, data_file: DataFile):
        self.filename = filename
        self.content = content
        self._data_file = data_file

    def change(self, markdown: str):
        """Record an edit and push it to the file's readers."""
        if markdown == self.content:
            return
        self.content = markdown
        self._data_file.notify_change(self.filename, markdown)


class MarkdownEditor:
    """Opens and tracks editor sessions, one per filename."""

    def __init__(self, data_file: DataFile):
        self.data_file = data_file
        self.sessions: Dict[str, EditorSession] = {}

    def open(self, filename: str, content: str) -> EditorSession:
        """
        Open (or reopen) an editor for a file.

        Args:
            filename: Localized filename being edited.
            content: Text the editor starts from.

        Returns:
            The editor session for the file.
        """
        session = EditorSession(filename, content or "", self.data_file)
        self.sessions[filename] = session
        logger.info(f"Opened editor for {filename} ({len(session.content)} characters)")
        return session

    def get_session(self, filename: str) -> Optional[EditorSession]:
        return self.sessions.get(filename)

    def close(self, filename: str):
        if self.sessions.pop(filename, None) is not None:
            logger.info(f"Closed editor for {filename}")
