# storefront/core/query_client.py
"""
In-process query/mutation cache (the remote sync engine).

Contract used by the commerce stores:
  - query-by-key: results are cached per key and shared by every observer
  - mutate-with-invalidate: mutations report status and run an on_success
    hook, which typically calls invalidate_queries(...)
  - refetch-on-invalidate: invalidated queries that someone observes are
    refetched in the background; unobserved ones refetch on next fetch
  - a fetch that is invalidated while in flight runs again, so its result
    never masks a write that landed after it started
  - refetch-on-observe: every new enabled observer triggers a fetch

Everything runs on the caller's asyncio event loop. No timeout is imposed
on query or mutation functions.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]
QueryFn = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class MutationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class Query:
    """Cache entry for one query key."""

    def __init__(self, key: QueryKey, query_fn: QueryFn | None = None):
        self.key = key
        self.query_fn = query_fn
        self.data: Any = None
        self.error: BaseException | None = None
        self.status = QueryStatus.PENDING
        self.is_invalidated = False
        # bumped by every invalidation
        self.generation = 0
        self.observers: list["QueryObserver"] = []
        self.fetch_task: asyncio.Task | None = None

    @property
    def is_fetching(self) -> bool:
        return self.fetch_task is not None and not self.fetch_task.done()

    @property
    def is_fresh(self) -> bool:
        return self.status == QueryStatus.SUCCESS and not self.is_invalidated

    @property
    def is_active(self) -> bool:
        return any(obs.enabled for obs in self.observers)


class QueryObserver:
    """
    A subscription to one query key.

    While at least one enabled observer exists, invalidation of the key
    triggers a background refetch.
    """

    def __init__(
        self,
        client: "QueryClient",
        query: Query,
        enabled: bool = True,
        default: Any = None,
    ):
        self.client = client
        self.query = query
        self.enabled = enabled
        self.default = default

    @property
    def key(self) -> QueryKey:
        return self.query.key

    @property
    def data(self) -> Any:
        if not self.enabled or self.query.data is None:
            return self.default
        return self.query.data

    @property
    def status(self) -> QueryStatus:
        return self.query.status

    @property
    def error(self) -> BaseException | None:
        return self.query.error

    @property
    def is_fetching(self) -> bool:
        return self.query.is_fetching

    async def refetch(self) -> Any:
        if not self.enabled:
            return self.default
        await self.client._fetch(self.query)
        return self.data

    def close(self) -> None:
        if self in self.query.observers:
            self.query.observers.remove(self)


class Mutation:
    """
    A remote write with status tracking.

    mutate() schedules the write and never raises; failures are logged
    and reported through `status` / `error`. mutate_async() is the
    awaiting variant that re-raises.
    """

    def __init__(
        self,
        client: "QueryClient",
        mutation_fn: Callable[[Any], Awaitable[Any]],
        on_success: Callable[[Any, Any], Any] | None = None,
        on_error: Callable[[BaseException, Any], Any] | None = None,
    ):
        self.client = client
        self.mutation_fn = mutation_fn
        self.on_success = on_success
        self.on_error = on_error
        self.status = MutationStatus.IDLE
        self.data: Any = None
        self.error: BaseException | None = None
        self.variables: Any = None
        self._in_flight = 0

    @property
    def is_pending(self) -> bool:
        return self._in_flight > 0

    def mutate(self, variables: Any) -> asyncio.Task:
        task = self.client._spawn(self._execute(variables, raise_errors=False))
        self._begin(variables)
        return task

    async def mutate_async(self, variables: Any) -> Any:
        self._begin(variables)
        return await self._execute(variables, raise_errors=True)

    def reset(self) -> None:
        self.status = MutationStatus.IDLE
        self.data = None
        self.error = None
        self.variables = None

    def _begin(self, variables: Any) -> None:
        # pending as soon as the write is requested, before it first runs
        self._in_flight += 1
        self.status = MutationStatus.PENDING
        self.variables = variables
        self.error = None

    async def _execute(self, variables: Any, raise_errors: bool) -> Any:
        try:
            try:
                data = await self.mutation_fn(variables)
            except Exception as e:
                self.status = MutationStatus.ERROR
                self.error = e
                logger.warning(f"Mutation failed: {e!r}")
                if self.on_error is not None:
                    await _maybe_await(self.on_error(e, variables))
                if raise_errors:
                    raise
                return None

            self.status = MutationStatus.SUCCESS
            self.data = data
            if self.on_success is not None:
                await _maybe_await(self.on_success(data, variables))
            return data
        finally:
            self._in_flight -= 1


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class QueryClient:
    """
    Cache of queries keyed by tuples, plus the mutations that write
    through to the remote side.

    retry / retry_delay apply to query functions only; mutations are
    attempted once.
    """

    def __init__(self, retry: int = 0, retry_delay: float = 0.0):
        self.retry = retry
        self.retry_delay = retry_delay
        self._queries: dict[QueryKey, Query] = {}
        self._tasks: set[asyncio.Task] = set()

    # ---- internal helpers ----

    def _get_or_create(self, key: QueryKey, query_fn: QueryFn | None = None) -> Query:
        query = self._queries.get(key)
        if query is None:
            query = Query(key, query_fn)
            self._queries[key] = query
        elif query_fn is not None:
            query.query_fn = query_fn
        return query

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _fetch(self, query: Query) -> asyncio.Task:
        """Start a fetch for `query`, or join the one already in flight."""
        if query.is_fetching:
            return query.fetch_task
        query.fetch_task = self._spawn(self._run_fetch(query))
        return query.fetch_task

    async def _run_fetch(self, query: Query) -> None:
        if query.query_fn is None:
            raise RuntimeError(f"No query function registered for {query.key!r}")

        while True:
            generation = query.generation
            if not await self._attempt(query):
                return
            if query.generation == generation:
                query.is_invalidated = False
                return
            # invalidated while in flight: the result may predate the write
            logger.info(f"Query {query.key!r} invalidated during fetch, refetching")

    async def _attempt(self, query: Query) -> bool:
        attempts = self.retry + 1
        for attempt in range(1, attempts + 1):
            try:
                data = await query.query_fn()
            except Exception as e:
                if attempt < attempts:
                    logger.info(
                        f"Query {query.key!r} failed (attempt {attempt}/{attempts}), retrying"
                    )
                    if self.retry_delay:
                        await asyncio.sleep(self.retry_delay)
                    continue
                # keep whatever data we had; the key stays invalidated
                query.status = QueryStatus.ERROR
                query.error = e
                logger.warning(f"Query {query.key!r} failed: {e!r}")
                return False

            query.data = data
            query.error = None
            query.status = QueryStatus.SUCCESS
            return True
        return False

    # ---- public operations ----

    def observe(
        self,
        key: QueryKey,
        query_fn: QueryFn,
        enabled: bool = True,
        default: Any = None,
    ) -> QueryObserver:
        """
        Subscribe to `key`. An enabled observer always kicks off a
        background fetch; cached data stays readable until it lands.

        Must be called from a running event loop when enabled.
        """
        query = self._get_or_create(key, query_fn)
        observer = QueryObserver(self, query, enabled=enabled, default=default)
        query.observers.append(observer)
        if enabled:
            self._fetch(query)
        return observer

    async def fetch_query(self, key: QueryKey, query_fn: QueryFn) -> Any:
        """
        Return cached data for `key` when fresh, otherwise fetch it.

        Raises:
            The query function's last exception if every attempt failed.
        """
        query = self._get_or_create(key, query_fn)
        if query.is_fresh:
            return query.data
        await self._fetch(query)
        if query.status == QueryStatus.ERROR:
            raise query.error
        return query.data

    def get_query_data(self, key: QueryKey, default: Any = None) -> Any:
        query = self._queries.get(key)
        if query is None or query.data is None:
            return default
        return query.data

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        query = self._get_or_create(key)
        query.data = data
        query.error = None
        query.status = QueryStatus.SUCCESS
        query.is_invalidated = False

    def invalidate_queries(self, prefix: QueryKey = ()) -> list[asyncio.Task]:
        """
        Mark every query whose key starts with `prefix` as stale.

        Active (observed and enabled) queries are refetched in the
        background; the returned tasks complete when those refetches do.
        """
        tasks = []
        for key, query in self._queries.items():
            if key[: len(prefix)] != prefix:
                continue
            query.is_invalidated = True
            query.generation += 1
            if query.is_active and query.query_fn is not None:
                tasks.append(self._fetch(query))
        return tasks

    def mutation(
        self,
        mutation_fn: Callable[[Any], Awaitable[Any]],
        on_success: Callable[[Any, Any], Any] | None = None,
        on_error: Callable[[BaseException, Any], Any] | None = None,
    ) -> Mutation:
        return Mutation(self, mutation_fn, on_success=on_success, on_error=on_error)

    async def settle(self) -> None:
        """Wait until no query fetch or mutation is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Settle in-flight work and drop the cache."""
        await self.settle()
        self._queries.clear()
