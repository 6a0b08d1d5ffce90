from collections.abc import Iterable

from dishka import Provider, Scope, alias, from_context, provide
from sqlalchemy import Engine

from linkstore.config import Config
from linkstore.domain.link.port.code_registry import LinkingCodeRegistry
from linkstore.domain.link.port.link_store import LinkStore
from linkstore.domain.link.port.notifier import LinkEventNotifier
from linkstore.domain.link.service.linking import LinkingService
from linkstore.infrastructure.event.memory_bus import InMemoryLinkEventBus
from linkstore.infrastructure.persistence.codec import LocalIdCodec, codec_for
from linkstore.infrastructure.persistence.database import create_db_engine
from linkstore.infrastructure.persistence.migrate import run_migrations
from linkstore.infrastructure.persistence.repository.code import SQLAlchemyLinkingCodeRegistry
from linkstore.infrastructure.persistence.repository.link import SQLAlchemyLinkStore
from linkstore.infrastructure.persistence.tables import LinkTables, build_tables


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> Iterable[Engine]:
        engine = create_db_engine(config.database)
        yield engine
        engine.dispose()

    @provide(scope=Scope.APP)
    def get_codec(self, engine: Engine, config: Config) -> LocalIdCodec:
        return codec_for(engine.dialect, native=config.database.native_uuids)

    @provide(scope=Scope.APP)
    def get_tables(self, engine: Engine, codec: LocalIdCodec, config: Config) -> LinkTables:
        if config.database.auto_migrate:
            run_migrations(engine, native_uuids=codec.native)
        return build_tables(codec)

    # Event hooks
    event_bus = provide(InMemoryLinkEventBus, scope=Scope.APP)
    notifier = alias(source=InMemoryLinkEventBus, provides=LinkEventNotifier)

    @provide(scope=Scope.APP)
    def get_link_store(
        self,
        engine: Engine,
        codec: LocalIdCodec,
        tables: LinkTables,
        notifier: LinkEventNotifier,
    ) -> LinkStore:
        return SQLAlchemyLinkStore(engine, codec, tables, notifier)

    @provide(scope=Scope.APP)
    def get_code_registry(
        self, engine: Engine, codec: LocalIdCodec, tables: LinkTables
    ) -> LinkingCodeRegistry:
        return SQLAlchemyLinkingCodeRegistry(engine, codec, tables)

    @provide(scope=Scope.APP)
    def get_linking_service(
        self, store: LinkStore, registry: LinkingCodeRegistry, config: Config
    ) -> LinkingService:
        return LinkingService(_store=store, _registry=registry, _config=config.linking)
