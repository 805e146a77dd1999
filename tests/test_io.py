"""
Tests for the requests based transport, with the session mocked.
"""
import tempfile
from unittest.mock import Mock

from davutil.io import SyncIO, SyncIOProtocol
from davutil.io.sync import dump_communication
from davutil.lib import error
from davutil.protocol import DAVMethod, DAVRequest, DAVResponse

REQUEST = DAVRequest(
    method=DAVMethod.PROPFIND,
    url="https://dav.example.com/config/",
    headers={"Depth": "1"},
    body=b"<propfind/>",
)


def _session(status=207, body=b"<multistatus/>"):
    session = Mock()
    session.request.return_value = Mock(
        status_code=status, headers={"Content-Type": "application/xml"}, content=body
    )
    return session


class TestSyncIO:
    def test_protocol(self):
        assert isinstance(SyncIO(session=_session()), SyncIOProtocol)

    def test_execute(self):
        session = _session()
        io = SyncIO(session=session, timeout=5, verify=False)
        response = io.execute(REQUEST)
        assert response.status == 207
        assert response.body == b"<multistatus/>"
        assert response.headers["Content-Type"] == "application/xml"
        session.request.assert_called_once_with(
            "PROPFIND",
            "https://dav.example.com/config/",
            headers={"Depth": "1"},
            data=b"<propfind/>",
            timeout=5,
            verify=False,
        )

    def test_shared_session_not_closed(self):
        session = _session()
        with SyncIO(session=session):
            pass
        session.close.assert_not_called()

    def test_communication_dump(self, monkeypatch, tmp_path):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        monkeypatch.setattr(error, "debug_dump_communication", True)
        SyncIO(session=_session()).execute(REQUEST)
        dumps = list(tmp_path.glob("davutilcomm*"))
        assert len(dumps) == 1
        content = dumps[0].read_bytes()
        assert b"PROPFIND https://dav.example.com/config/" in content
        assert b"207 Multi-Status" in content

    def test_dump_communication(self, monkeypatch, tmp_path):
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        name = dump_communication(
            REQUEST, DAVResponse(status=404, headers={}, body=b"")
        )
        with open(name, "rb") as f:
            content = f.read()
        assert b"Depth: 1" in content
        assert b"404 Not Found" in content
