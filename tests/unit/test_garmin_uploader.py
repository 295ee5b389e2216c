"""Tests for GarminUploader (upload stage) with a mocked GarminClient."""
from unittest.mock import AsyncMock, MagicMock

import garminconnect
import pytest
from garth.exc import GarthHTTPError

from p2g.garmin.auth import SessionExpiredError
from p2g.garmin.uploader import GarminUploadError, GarminUploader, is_duplicate_activity


def http_error(status_code: int) -> GarthHTTPError:
    return GarthHTTPError(
        msg=f"Error in request: {status_code}",
        error=MagicMock(response=MagicMock(status_code=status_code)),
    )


@pytest.fixture
def staged(settings):
    """Two staged TCX files plus a stray file the uploader must ignore."""
    settings.upload_directory.mkdir(parents=True)
    files = []
    for name in ("b_ride.tcx", "a_run.tcx"):
        path = settings.upload_directory / name
        path.write_text("<TrainingCenterDatabase/>")
        files.append(path)
    (settings.upload_directory / "notes.txt").write_text("ignore me")
    return files


class TestUploadAll:
    @pytest.mark.asyncio
    async def test_uploads_staged_files_in_name_order(self, settings, staged):
        client = AsyncMock()
        count = await GarminUploader(settings, client=client).upload_all()

        assert count == 2
        client.connect.assert_awaited_once()
        uploaded = [c.args[0].name for c in client.upload_activity.await_args_list]
        assert uploaded == ["a_run.tcx", "b_ride.tcx"]

    @pytest.mark.asyncio
    async def test_uploaded_files_removed_from_staging(self, settings, staged):
        await GarminUploader(settings, client=AsyncMock()).upload_all()

        remaining = sorted(p.name for p in settings.upload_directory.iterdir())
        assert remaining == ["notes.txt"]

    @pytest.mark.asyncio
    async def test_nothing_staged_skips_garmin(self, settings):
        client = AsyncMock()
        count = await GarminUploader(settings, client=client).upload_all()

        assert count == 0
        client.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disabled_upload_skips_garmin(self, settings, staged):
        settings.garmin_upload = False
        client = AsyncMock()
        count = await GarminUploader(settings, client=client).upload_all()

        assert count == 0
        client.connect.assert_not_awaited()
        assert all(p.exists() for p in staged)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        garminconnect.GarminConnectConnectionError("500 Server Error"),
        garminconnect.GarminConnectTooManyRequestsError("429"),
        garminconnect.GarminConnectAuthenticationError("401"),
        http_error(500),
        http_error(400),
    ])
    async def test_garmin_errors_wrapped(self, settings, staged, error):
        client = AsyncMock()
        client.upload_activity.side_effect = error

        with pytest.raises(GarminUploadError, match="a_run.tcx"):
            await GarminUploader(settings, client=client).upload_all()

    @pytest.mark.asyncio
    async def test_failed_file_stays_staged(self, settings, staged):
        client = AsyncMock()
        client.upload_activity.side_effect = [
            None,
            garminconnect.GarminConnectConnectionError("500"),
        ]

        with pytest.raises(GarminUploadError):
            await GarminUploader(settings, client=client).upload_all()

        assert not (settings.upload_directory / "a_run.tcx").exists()
        assert (settings.upload_directory / "b_ride.tcx").exists()

    @pytest.mark.asyncio
    async def test_session_errors_not_wrapped(self, settings, staged):
        client = AsyncMock()
        client.connect.side_effect = SessionExpiredError("expired")

        with pytest.raises(SessionExpiredError):
            await GarminUploader(settings, client=client).upload_all()


class TestDuplicateActivity:
    @pytest.mark.asyncio
    async def test_duplicate_is_unstaged_and_not_counted(self, settings, staged):
        client = AsyncMock()
        client.upload_activity.side_effect = [http_error(409), None]

        count = await GarminUploader(settings, client=client).upload_all()

        assert count == 1
        assert client.upload_activity.await_count == 2
        remaining = sorted(p.name for p in settings.upload_directory.iterdir())
        assert remaining == ["notes.txt"]

    @pytest.mark.asyncio
    async def test_all_duplicates_succeed(self, settings, staged):
        client = AsyncMock()
        client.upload_activity.side_effect = http_error(409)

        assert await GarminUploader(settings, client=client).upload_all() == 0

    def test_only_conflict_counts(self):
        assert is_duplicate_activity(http_error(409)) is True
        assert is_duplicate_activity(http_error(500)) is False
        assert is_duplicate_activity(garminconnect.GarminConnectConnectionError("409")) is False
