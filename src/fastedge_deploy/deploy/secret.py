"""Secret deployment flow.

Build the desired slots from the inputs, resolve the existing secret (by id,
then by name), then create it or update it with slots the inputs no longer
mention marked for deletion.
"""

from ..clients import FastEdgeClient, NotFound
from ..config import DeploySecretSettings
from ..errors import ConfigurationError, DeployError
from ..inputs import secret_resource_from_settings
from ..logging import bind_flow, clear_context, get_logger
from ..schemas import Secret
from .reconcile import reconcile_secret_slots
from .reporter import Reporter

logger = get_logger(__name__)

NO_SLOTS_MESSAGE = (
    'You must provide a "secret" value or a "secret_slots" string with at least one slot.'
)


async def resolve_secret(settings: DeploySecretSettings, client: FastEdgeClient) -> Secret | None:
    """Find the secret to update, with its slots.

    A by-name match is a list item without slots, so it is re-fetched by id.
    """
    secret_id = settings.secret_id.strip()
    if secret_id and secret_id != "0":
        secret = await client.secrets.get(secret_id)
        logger.info("secret_found_by_id", secret_id=secret.id)
        return secret

    match = await client.secrets.find_by_name(settings.secret_name)
    if isinstance(match, NotFound):
        logger.info("secret_not_found_by_name", secret_name=settings.secret_name)
        return None
    logger.info(
        "secret_found_by_name", secret_name=settings.secret_name, secret_id=match.resource.id
    )
    return await client.secrets.get(match.resource.id)


async def deploy_secret(
    settings: DeploySecretSettings, client: FastEdgeClient, reporter: Reporter
) -> Secret:
    """Create or update the secret described by ``settings``."""
    missing = settings.missing_inputs(*settings.MANDATORY_INPUTS)
    if missing:
        raise ConfigurationError(missing)

    desired = secret_resource_from_settings(settings)
    if not desired.secret_slots:
        raise DeployError(NO_SLOTS_MESSAGE)

    current = await resolve_secret(settings, client)
    if current is None:
        logger.info("secret_creating", secret_name=settings.secret_name)
        created = await client.secrets.create(desired)
        reporter.notice(f"Secret created with ID: {created.id}")
        reporter.set_output("secret_id", created.id)
        return created

    payload = reconcile_secret_slots(desired, current).model_copy(update={"id": current.id})
    deleted = [slot.slot for slot in payload.secret_slots if slot.is_deletion]
    logger.info("secret_updating", secret_id=current.id, deleted_slots=deleted)

    updated = await client.secrets.update(payload)
    reporter.notice(f"Secret updated with ID: {updated.id}")
    reporter.set_output("secret_id", updated.id)
    return updated


async def run_deploy_secret(settings: DeploySecretSettings, reporter: Reporter) -> int:
    """Run the secret flow end to end. Returns the process exit code."""
    bind_flow("deploy-secret", secret_name=settings.secret_name)
    try:
        async with FastEdgeClient.from_config(settings.api_config()) as client:
            await deploy_secret(settings, client, reporter)
    except Exception as e:
        logger.debug("deploy_secret_failed", exc_info=True)
        reporter.set_failed(str(e))
        return 1
    finally:
        clear_context()
    return 0
