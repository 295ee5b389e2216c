"""Tests for the GarminClient async wrapper."""
from pathlib import Path
from unittest.mock import MagicMock

import garminconnect
import pytest

from p2g.garmin.auth import NoSessionError
from p2g.garmin.client import GarminClient


@pytest.fixture
def mock_api():
    api = MagicMock(spec=garminconnect.Garmin)
    api.upload_activity.return_value = {"detailedImportResult": {"successes": [{}]}}
    return api


class TestGarminClient:
    @pytest.mark.asyncio
    async def test_connect_builds_client_from_auth(self, mock_api):
        auth = MagicMock()
        auth.build_client.return_value = mock_api
        client = GarminClient(auth=auth)

        await client.connect()

        auth.build_client.assert_called_once()
        assert client.connected

    @pytest.mark.asyncio
    async def test_connect_propagates_missing_session(self):
        auth = MagicMock()
        auth.build_client.side_effect = NoSessionError("no session")
        client = GarminClient(auth=auth)

        with pytest.raises(NoSessionError):
            await client.connect()
        assert not client.connected

    @pytest.mark.asyncio
    async def test_upload_activity_passes_string_path(self, mock_api):
        auth = MagicMock()
        auth.build_client.return_value = mock_api
        client = GarminClient(auth=auth)
        await client.connect()

        resp = await client.upload_activity(Path("/tmp/ride.tcx"))

        mock_api.upload_activity.assert_called_once_with("/tmp/ride.tcx")
        assert "detailedImportResult" in resp
