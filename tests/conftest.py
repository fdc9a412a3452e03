import pytest

from marked_view.components.marked_directive import MarkedDirectiveFactory
from marked_view.services.data_file import DataFile, FileCallbacks
from marked_view.services.editor import EditorState
from marked_view.services.locale import LocaleService
from marked_view.services.marked_provider import MarkedProvider
from marked_view.utils.alerts import Alerts


class RecordingDataFile(DataFile):
    """DataFile that records reads instead of loading; tests answer them by hand."""

    def __init__(self):
        super().__init__()
        self.reads = []

    def read(self, filename: str, callbacks: FileCallbacks):
        self._register(filename, callbacks)
        self.reads.append((filename, callbacks))

    @property
    def filenames(self):
        return [filename for filename, _ in self.reads]

    def succeed(self, content: str, index: int = -1):
        self.reads[index][1].on_success(content)

    def not_found(self, index: int = -1):
        self.reads[index][1].on_404("")

    def fail(self, index: int = -1):
        self.reads[index][1].on_error()


@pytest.fixture
def marked():
    return MarkedProvider().get()


@pytest.fixture
def data_file():
    return RecordingDataFile()


@pytest.fixture
def locale():
    return LocaleService("en")


@pytest.fixture
def alerts():
    return Alerts()


@pytest.fixture
def editor_state():
    return EditorState(show_editors=True)


@pytest.fixture
def factory(data_file, locale, alerts, editor_state):
    return MarkedDirectiveFactory(
        MarkedProvider(),
        data_file=data_file,
        locale=locale,
        alerts=alerts,
        editor_state=editor_state,
    )
