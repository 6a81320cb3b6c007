from resource_migrator.stores.base import ContentStore, ObjectStore
from resource_migrator.utils.errors import MigrationError, PreFlightCheckError
from resource_migrator.utils.log import log_message


def run_pre_flight_checks(content_store: ContentStore, object_store: ObjectStore) -> None:
    """
    Verifies that both stores are reachable before any record is touched.

    Args:
        content_store: The store holding the posts.
        object_store: The store receiving the migrated resources.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    log_message("Running pre-flight checks...")

    # Check 1: content store connection
    try:
        content_store.connect()
    except PreFlightCheckError:
        raise
    except MigrationError as e:
        raise PreFlightCheckError(f"Could not connect to the content store: {e}") from e

    # Check 2: object store authentication and CDN lookup
    try:
        object_store.authenticate()
    except PreFlightCheckError:
        raise
    except MigrationError as e:
        raise PreFlightCheckError(f"Object store authentication failed: {e}") from e

    log_message("Pre-flight checks passed successfully.")
