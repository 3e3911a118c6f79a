"""Application deployment flow.

Resolve the target application (by id, then by name), upload the local WASM
binary when it is new or changed, then create or update the application.
"""

from ..binary import has_binary_changed
from ..clients import FastEdgeClient, NotFound
from ..config import DeployAppSettings
from ..errors import ConfigurationError
from ..inputs import app_resource_from_settings
from ..logging import bind_flow, clear_context, get_logger
from ..schemas import App, AppWithBinary, Binary
from .reporter import Reporter

logger = get_logger(__name__)


async def resolve_app(settings: DeployAppSettings, client: FastEdgeClient) -> AppWithBinary | None:
    """Find the application to update, with its binary hydrated.

    An explicit non-zero ``app_id`` wins over ``app_name``. A name that
    matches nothing returns None so that the caller creates the application.
    """
    app_id = settings.app_id.strip()
    if app_id and app_id != "0":
        app = await client.apps.get(app_id).include_binary()
        logger.info("app_found_by_id", app_id=app.id)
        return app

    if settings.app_name:
        match = await client.apps.find_by_name(settings.app_name)
        if isinstance(match, NotFound):
            logger.info("app_not_found_by_name", app_name=settings.app_name)
            return None
        app = await client.apps.enhance(match.resource).include_binary()
        logger.info("app_found_by_name", app_name=settings.app_name, app_id=app.id)
        return app

    return None


def binary_needs_upload(wasm_file: str, binary: Binary | None) -> bool:
    """A binary without a recorded checksum always counts as changed."""
    if binary is None or not binary.checksum:
        return True
    return has_binary_changed(wasm_file, binary.checksum)


async def deploy_app(
    settings: DeployAppSettings, client: FastEdgeClient, reporter: Reporter
) -> App:
    """Create or update the application described by ``settings``."""
    missing = settings.missing_inputs(*settings.MANDATORY_INPUTS)
    if missing:
        raise ConfigurationError(missing)

    app = await resolve_app(settings, client)
    resource = app_resource_from_settings(settings)

    if app is None:
        logger.info("app_creating", app_name=settings.app_name)
        binary = await client.binaries.upload(settings.wasm_file)
        created = await client.apps.create(resource.model_copy(update={"binary": binary.id}))
        reporter.notice(f"Application created with ID: {created.id}")
        reporter.set_output("app_id", created.id)
        reporter.set_output("binary_id", created.binary)
        return created

    logger.info("app_updating", app_name=settings.app_name, app_id=app.id)
    current = app.binary
    if current is not None and not binary_needs_upload(settings.wasm_file, current):
        binary_id = current.id
        logger.debug("binary_unchanged", app_id=app.id, binary_id=binary_id)
    else:
        logger.debug("binary_changed", app_id=app.id)
        binary_id = (await client.binaries.upload(settings.wasm_file)).id

    updated = await client.apps.update(
        resource.model_copy(update={"binary": binary_id, "id": app.id})
    )
    reporter.notice(f"Application updated with ID: {updated.id}")
    reporter.set_output("app_id", updated.id)
    reporter.set_output("binary_id", updated.binary)
    return updated


async def run_deploy_app(settings: DeployAppSettings, reporter: Reporter) -> int:
    """Run the application flow end to end. Returns the process exit code."""
    bind_flow("deploy-app", app_name=settings.app_name)
    try:
        async with FastEdgeClient.from_config(settings.api_config()) as client:
            await deploy_app(settings, client, reporter)
    except Exception as e:
        logger.debug("deploy_app_failed", exc_info=True)
        reporter.set_failed(str(e))
        return 1
    finally:
        clear_context()
    return 0
