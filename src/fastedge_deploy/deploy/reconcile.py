from ..schemas import Secret, SecretResource, SecretSlot


def reconcile_secret_slots(desired: SecretResource, current: Secret) -> SecretResource:
    """Compute the slot edit set that moves ``current`` to ``desired``.

    Desired slots are kept as given (upserts). Every slot number the server
    has but ``desired`` lacks is appended as a deletion marker, in server
    order.
    """
    wanted = {slot.slot for slot in desired.secret_slots}
    deletions = [
        SecretSlot(slot=number) for number in current.slot_numbers if number not in wanted
    ]
    return SecretResource(
        id=desired.id,
        name=desired.name,
        comment=desired.comment,
        secret_slots=[*desired.secret_slots, *deletions],
    )
