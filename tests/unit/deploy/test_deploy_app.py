import json

import httpx
import pytest
import respx
import structlog

from fastedge_deploy.config import DeployAppSettings
from fastedge_deploy.deploy import deploy_app, run_deploy_app
from fastedge_deploy.deploy.app import binary_needs_upload
from fastedge_deploy.errors import ConfigurationError, FastEdgeAPIError
from fastedge_deploy.schemas import Binary
from tests.fakes import API_KEY, API_URL, WASM_CHECKSUM

EXISTING_APP = {
    "id": 789,
    "name": "my-app",
    "binary": 12,
    "status": 1,
    "env": {"OLD": "1"},
    "rsp_headers": {},
    "secrets": {},
}


@pytest.fixture
def settings(wasm_file):
    return DeployAppSettings(
        api_key=API_KEY,
        api_url=API_URL,
        wasm_file=str(wasm_file),
        app_name="my-app",
        env='{"LOG_LEVEL": "debug"}',
        secrets='{"TOKEN": {"id": 4}}',
    )


def binary_response(checksum: str) -> httpx.Response:
    return httpx.Response(httpx.codes.OK, json={"id": 12, "checksum": checksum})


class TestBinaryNeedsUpload:
    def test_no_binary(self, wasm_file):
        assert binary_needs_upload(str(wasm_file), None)

    def test_binary_without_checksum(self, wasm_file):
        assert binary_needs_upload(str(wasm_file), Binary(id=12))

    def test_matching_checksum(self, wasm_file):
        assert not binary_needs_upload(str(wasm_file), Binary(id=12, checksum=WASM_CHECKSUM))

    def test_different_checksum(self, wasm_file):
        assert binary_needs_upload(str(wasm_file), Binary(id=12, checksum="0" * 32))


class TestDeployApp:
    @pytest.mark.asyncio
    async def test_creates_app_when_name_not_found(self, settings, client, reporter):
        async with respx.mock(base_url=API_URL) as respx_mock:
            lookup = respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"apps": []})
            )
            upload = respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 55})
            )
            create = respx_mock.post("/fastedge/v1/apps").mock(
                return_value=httpx.Response(
                    httpx.codes.CREATED, json={"id": 101, "name": "my-app", "binary": 55}
                )
            )

            created = await deploy_app(settings, client, reporter)

            assert dict(lookup.calls.last.request.url.params) == {"name": "my-app"}
            assert upload.call_count == 1
            body = json.loads(create.calls.last.request.content)
            assert body == {
                "name": "my-app",
                "status": 1,
                "binary": 55,
                "env": {"LOG_LEVEL": "debug"},
                "rsp_headers": {},
                "secrets": {"TOKEN": {"id": 4}},
                "comment": "",
            }
            assert created.id == 101
            assert reporter.notices == ["Application created with ID: 101"]
            assert reporter.outputs == {"app_id": 101, "binary_id": 55}

    @pytest.mark.asyncio
    async def test_updates_by_id_without_upload_when_binary_unchanged(
        self, settings, client, reporter
    ):
        settings.app_id = "789"

        async with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
            respx_mock.get("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json=EXISTING_APP)
            )
            respx_mock.get("/fastedge/v1/binaries/12").mock(
                return_value=binary_response(WASM_CHECKSUM)
            )
            lookup = respx_mock.get("/fastedge/v1/apps")
            upload = respx_mock.post("/fastedge/v1/binaries/raw")
            update = respx_mock.put("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json={**EXISTING_APP, "binary": 12})
            )

            await deploy_app(settings, client, reporter)

            assert not lookup.called
            assert not upload.called
            body = json.loads(update.calls.last.request.content)
            assert body["id"] == 789
            assert body["binary"] == 12
            assert body["env"] == {"LOG_LEVEL": "debug"}
            assert reporter.notices == ["Application updated with ID: 789"]
            assert reporter.outputs == {"app_id": 789, "binary_id": 12}

    @pytest.mark.asyncio
    async def test_updates_with_new_binary_when_checksum_differs(self, settings, client, reporter):
        settings.app_id = "789"

        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json=EXISTING_APP)
            )
            respx_mock.get("/fastedge/v1/binaries/12").mock(
                return_value=binary_response("f" * 32)
            )
            respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(
                    httpx.codes.CREATED, json={"id": 56, "checksum": WASM_CHECKSUM}
                )
            )
            update = respx_mock.put("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json={**EXISTING_APP, "binary": 56})
            )

            await deploy_app(settings, client, reporter)

            assert json.loads(update.calls.last.request.content)["binary"] == 56
            assert reporter.outputs == {"app_id": 789, "binary_id": 56}

    @pytest.mark.asyncio
    async def test_updates_app_found_by_name(self, settings, client, reporter):
        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"apps": [EXISTING_APP]})
            )
            respx_mock.get("/fastedge/v1/binaries/12").mock(
                return_value=binary_response(WASM_CHECKSUM)
            )
            update = respx_mock.put("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json=EXISTING_APP)
            )

            await deploy_app(settings, client, reporter)

            assert update.call_count == 1
            assert reporter.notices == ["Application updated with ID: 789"]

    @pytest.mark.asyncio
    async def test_zero_app_id_looks_up_by_name(self, settings, client, reporter):
        settings.app_id = "0"

        async with respx.mock(base_url=API_URL) as respx_mock:
            lookup = respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"apps": []})
            )
            respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 55})
            )
            respx_mock.post("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 101, "binary": 55})
            )

            await deploy_app(settings, client, reporter)

            assert lookup.called
            assert reporter.outputs["app_id"] == 101

    @pytest.mark.asyncio
    async def test_app_without_binary_gets_upload(self, settings, client, reporter):
        settings.app_id = "789"

        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json={**EXISTING_APP, "binary": None})
            )
            upload = respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 57})
            )
            respx_mock.put("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.OK, json={**EXISTING_APP, "binary": 57})
            )

            await deploy_app(settings, client, reporter)

            assert upload.call_count == 1
            assert reporter.outputs["binary_id"] == 57

    @pytest.mark.asyncio
    async def test_missing_inputs_fail_before_any_request(self, client, reporter):
        settings = DeployAppSettings(api_key=API_KEY, app_name="my-app")

        async with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
            with pytest.raises(ConfigurationError) as exc_info:
                await deploy_app(settings, client, reporter)

            assert respx_mock.calls.call_count == 0

        assert exc_info.value.missing == ["api_url", "wasm_file"]
        assert str(exc_info.value) == "Mandatory inputs are missing: api_url, wasm_file"

    @pytest.mark.asyncio
    async def test_fetch_by_id_failure_propagates(self, settings, client, reporter):
        settings.app_id = "789"

        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps/789").mock(
                return_value=httpx.Response(httpx.codes.NOT_FOUND)
            )

            with pytest.raises(FastEdgeAPIError, match="^Error fetching application: Not Found$"):
                await deploy_app(settings, client, reporter)

        assert reporter.outputs == {}

    @pytest.mark.asyncio
    async def test_lookup_transport_error_is_not_treated_as_missing(
        self, settings, client, reporter
    ):
        async with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
            respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.SERVICE_UNAVAILABLE)
            )
            create = respx_mock.post("/fastedge/v1/apps")

            with pytest.raises(FastEdgeAPIError, match="Error fetching applications"):
                await deploy_app(settings, client, reporter)

            assert not create.called


class TestRunDeployApp:
    @pytest.mark.asyncio
    async def test_success_returns_zero(self, settings, reporter):
        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"apps": []})
            )
            respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 55})
            )
            respx_mock.post("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 101, "binary": 55})
            )

            assert await run_deploy_app(settings, reporter) == 0

        assert reporter.failures == []
        assert reporter.outputs == {"app_id": 101, "binary_id": 55}

    @pytest.mark.asyncio
    async def test_failure_is_reported_once(self, settings, reporter):
        async with respx.mock(base_url=API_URL) as respx_mock:
            respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.UNAUTHORIZED)
            )

            assert await run_deploy_app(settings, reporter) == 1

        assert reporter.failures == ["Error fetching applications: Unauthorized"]
        assert reporter.notices == []

    @pytest.mark.asyncio
    async def test_missing_inputs_reported(self, reporter):
        settings = DeployAppSettings()

        assert await run_deploy_app(settings, reporter) == 1

        assert reporter.failures == [
            "Mandatory inputs are missing: api_key, api_url, wasm_file, app_name"
        ]

    @pytest.mark.asyncio
    async def test_create_failure_after_upload_leaves_binary(self, settings, reporter):
        async with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
            respx_mock.get("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.OK, json={"apps": []})
            )
            upload = respx_mock.post("/fastedge/v1/binaries/raw").mock(
                return_value=httpx.Response(httpx.codes.CREATED, json={"id": 55})
            )
            create = respx_mock.post("/fastedge/v1/apps").mock(
                return_value=httpx.Response(httpx.codes.INTERNAL_SERVER_ERROR)
            )
            delete = respx_mock.route(method="DELETE")

            assert await run_deploy_app(settings, reporter) == 1

            assert upload.call_count == 1
            assert create.call_count == 1
            assert not delete.called
            assert respx_mock.calls.call_count == 3

        assert reporter.failures == ["Error creating application: Internal Server Error"]
        assert reporter.outputs == {}
        assert reporter.notices == []

    @pytest.mark.asyncio
    async def test_flow_context_is_cleared_after_run(self, reporter):
        await run_deploy_app(DeployAppSettings(), reporter)

        assert structlog.contextvars.get_contextvars() == {}
