"""Build a ready-to-use DataStore from configuration.

Loads resource definitions, connects the SQL adapter, and registers the
bundled adapters under the names resource definitions refer to.
"""

import logging
from pathlib import Path

from recordstore.config import StoreConfig, create_adapter
from recordstore.metadata.loader import DefinitionLoader
from recordstore.persistence.memory import MemoryAdapter
from recordstore.store.datastore import DataStore

logger = logging.getLogger(__name__)


def initialize_store(config: StoreConfig | None = None) -> DataStore:
    """Initialize a DataStore with every resource found under the metadata path.

    Hooks referenced from YAML must be registered before this is called.
    """
    if config is None:
        config = StoreConfig.from_env()

    loader = DefinitionLoader(config.metadata_path, default_adapter=config.default_adapter)
    loader.load_all()

    if config.is_sqlite:
        sqlite_path = config.database_url.replace("sqlite:///", "")
        if sqlite_path and sqlite_path != ":memory:":
            Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    sql = create_adapter(config)
    sql.connect()

    store = DataStore()
    store.register_adapter("sql", sql)
    store.register_adapter("memory", MemoryAdapter())

    for name in loader.list_resources():
        definition = loader.get_resource(name)
        if definition:
            store.define_resource(definition)
            sql.initialize_resource(definition)

    logger.info(
        "Initialized store with %d resource(s) from %s",
        len(store.definitions),
        config.metadata_path,
    )
    return store
